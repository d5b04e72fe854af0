from fieldbook.reschedule.reconciler import (
    BookingStore,
    RescheduleReconciler,
    RescheduleSaga,
    has_selection_changed,
)

__all__ = ["RescheduleReconciler", "RescheduleSaga", "BookingStore", "has_selection_changed"]
