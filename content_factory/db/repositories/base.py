from typing import Any, Generic, Optional, Sequence, Type, TypeVar
from sqlmodel import SQLModel, Session, select, func

# Video, Avatar, VideoPlanItem, AppSetting, UserPreferences
ModelT = TypeVar("ModelT", bound=SQLModel)

class BaseRepository(Generic[ModelT]):
    """
    Accès générique à une table : lectures filtrées, écriture, suppression.

    👉 Aucune règle métier ici (scoping par user, idempotence... = services).
    👉 Chaque écriture accepte commit=False : le service enchaîne plusieurs
       écritures (vidéo + plan items) puis fait un seul commit.
    👉 Les sous-classes fixent `model`.
    """

    model: Type[ModelT]

    def __init__(self, session: Session):
        self.session = session

    # ---------- Lecture ----------

    def get(self, id_: Any) -> Optional[ModelT]:
        return self.session.get(self.model, id_)

    def first(self, *where, order_by=None) -> Optional[ModelT]:
        """Première ligne qui satisfait toutes les conditions, ou None."""
        stmt = select(self.model).where(*where)
        if order_by is not None:
            stmt = stmt.order_by(order_by)
        return self.session.exec(stmt).first()

    def all(self, *where) -> Sequence[ModelT]:
        return self.session.exec(select(self.model).where(*where)).all()

    def list(self, offset: int = 0, limit: int = 100) -> Sequence[ModelT]:
        return self.session.exec(select(self.model).offset(offset).limit(limit)).all()

    def count(self) -> int:
        return self.session.exec(select(func.count()).select_from(self.model)).one()

    # ---------- Écriture ----------

    def create(self, *, commit: bool = True, **fields) -> ModelT:
        return self._persist(self.model(**fields), commit)

    def update(self, entity: ModelT, *, commit: bool = True, **changes) -> ModelT:
        for name, value in changes.items():
            setattr(entity, name, value)
        return self._persist(entity, commit)

    def delete(self, entity: ModelT, *, commit: bool = True) -> None:
        self.session.delete(entity)
        self._finish(commit)

    def _persist(self, entity: ModelT, commit: bool) -> ModelT:
        self.session.add(entity)
        self._finish(commit)
        if commit:
            self.session.refresh(entity)
        return entity

    def _finish(self, commit: bool) -> None:
        # sans commit : flush pour que l'id et les FKs soient visibles dans la transaction
        if commit:
            self.session.commit()
        else:
            self.session.flush()
