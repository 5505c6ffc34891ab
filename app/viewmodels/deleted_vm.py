from dataclasses import dataclass, field

from app.services.lifecycle import EquipmentLifecycle
from app.services.retention import is_expired, time_remaining


@dataclass
class DeletedItemsViewModel:
    items: list[dict] = field(default_factory=list)
    eligible_count: int = 0

    @property
    def total(self) -> int:
        return len(self.items)

    @classmethod
    async def load(cls, lifecycle: EquipmentLifecycle) -> "DeletedItemsViewModel":
        now = lifecycle.clock()
        policy = lifecycle.policy
        deleted = await lifecycle.list_soft_deleted()

        items = [
            {
                "equipment": item,
                "purge_due_at": policy.purge_due_at(item.last_updated),
                "time_remaining": time_remaining(policy, item.last_updated, now),
            }
            for item in deleted
        ]
        eligible = sum(1 for item in deleted if is_expired(policy, item.last_updated, now))
        return cls(items=items, eligible_count=eligible)
