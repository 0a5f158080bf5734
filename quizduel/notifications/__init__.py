from quizduel.notifications.reconciler import NotificationReconciler

__all__ = ["NotificationReconciler"]
