from pharmatrace.models.profile import Profile, UserRole
from pharmatrace.models.medicine import Medicine
from pharmatrace.models.batch import Batch, BatchStatus
from pharmatrace.models.batch_status_history import BatchStatusHistory

__all__ = ["Profile", "UserRole", "Medicine", "Batch", "BatchStatus", "BatchStatusHistory"]
