from typing import Type, TypeVar, Generic, Any, Optional, List
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import inspect, and_, select, update
from sqlalchemy.sql.selectable import Select
from app.db.base import Base

ModelType = TypeVar("ModelType", bound=Base)

class BaseDao(Generic[ModelType]):
    def __init__(self, model_class: Type[ModelType], db_session: AsyncSession):
        self.model: Type[ModelType] = model_class
        self.db_session: AsyncSession = db_session
        primary_keys = inspect(model_class).primary_key
        if not primary_keys:
            raise ValueError(f"Model {model_class.__name__} does not have a primary key.")
        self.pk: str = primary_keys[0].name

    # ==============================================================================
    # 1. 实体/对象方法 (Object Methods)
    #    - 输入和输出都应该是 ORM 对象实例
    # ==============================================================================

    async def get_list(
        self,
        where: Optional[dict | list] = None,
        order: Optional[list] = None,
        limit: int = 0
    ) -> list[ModelType]:
        stmt = self._quick_query(where=where, order=order, limit=limit)
        executed = await self.db_session.execute(stmt)
        return list(executed.scalars().all())

    async def get_one(
        self,
        where: Optional[dict | list] = None,
        order: Optional[list] = None,
        for_update: bool = False
    ) -> Optional[ModelType]:
        stmt = self._quick_query(where=where, order=order)
        if for_update:
            # 行级锁：在同一事务内串行化 read-check-write
            stmt = stmt.with_for_update()
        executed = await self.db_session.execute(stmt)
        return executed.scalars().first()

    async def get_by_pk(self, pk_value: Any, for_update: bool = False) -> Optional[ModelType]:
        return await self.get_one(where={self.pk: pk_value}, for_update=for_update)

    async def add(self, instance: ModelType, auto_flush: bool = True) -> ModelType:
        self.db_session.add(instance)
        if auto_flush:
            await self.db_session.flush()
            await self.db_session.refresh(instance)
        return instance

    # ==============================================================================
    # 2. 数据/批量方法 (Data/Bulk Methods)
    # ==============================================================================

    async def update_where(self, where: dict | list, values: dict) -> int:
        """Issues a single UPDATE and returns the number of matched rows."""
        if not where or not values:
            return 0
        conditions = self._where_format(where)
        stmt = update(self.model).where(*conditions).values(values).execution_options(synchronize_session=False)
        executed = await self.db_session.execute(stmt)
        return executed.rowcount

    # ==============================================================================
    # 3. 查询构建辅助方法 (Query Building Helpers)
    # ==============================================================================

    def _quick_query(
        self,
        stmt: Optional[Select] = None,
        where: Optional[dict | list] = None,
        order: Optional[list] = None,
        limit: int = 0
    ) -> Select:
        if stmt is None:
            stmt = select(self.model)
        if where is not None:
            stmt = stmt.filter(*self._where_format(where))
        if order is not None:
            stmt = stmt.order_by(*order)
        if limit > 0:
            stmt = stmt.limit(limit)
        return stmt

    def _where_format(self, conditions: list | dict) -> list:
        """
        Accepts either a {column: value} equality mapping or a list of
        SQLAlchemy expressions, and returns a list usable by .where().
        """
        if not conditions:
            return []
        if isinstance(conditions, dict):
            processed = [getattr(self.model, field) == value for field, value in conditions.items()]
        else:
            processed = list(conditions)
        if len(processed) > 1:
            processed = [and_(*processed)]
        return processed
