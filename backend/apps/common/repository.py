from typing import Any, Dict, Generic, List, Optional, Type, TypeVar

from django.db import models, transaction

T = TypeVar('T', bound=models.Model)


class GenericRepository(Generic[T]):
    """Single-model data access; every method touches at most one row or one filter."""

    def __init__(self, model: Type[T]):
        self.model = model

    def get(self, **filters) -> Optional[T]:
        return self.model.objects.filter(**filters).first()

    def get_by_id(self, pk: Any) -> Optional[T]:
        return self.get(pk=pk)

    def create(self, **data) -> T:
        return self.model.objects.create(**data)

    def update_by_id(self, pk: Any, fields: Dict[str, Any], *, validate: bool = True) -> Optional[T]:
        """
        Lock the row, apply ``fields`` and return the refreshed instance.

        Returns ``None`` when the row no longer exists. With ``validate`` the
        instance is passed through ``full_clean`` before saving, so a
        ``django.core.exceptions.ValidationError`` propagates to the caller.
        """
        with transaction.atomic():
            obj = self.model.objects.select_for_update().filter(pk=pk).first()
            if obj is None:
                return None
            for k, v in fields.items():
                setattr(obj, k, v)
            if validate:
                obj.full_clean()
            update_fields: List[str] = list(fields.keys())
            if update_fields:
                # auto_now columns are only refreshed when listed explicitly
                update_fields += [
                    f.name for f in self.model._meta.concrete_fields
                    if getattr(f, "auto_now", False) and f.name not in update_fields
                ]
                obj.save(update_fields=update_fields)
        return obj

    def delete_by_id(self, pk: Any) -> bool:
        deleted, _ = self.model.objects.filter(pk=pk).delete()
        return deleted > 0
