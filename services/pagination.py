from math import ceil
from typing import Generic, List, Sequence, TypeVar
from pydantic import BaseModel
from sqlmodel import Session, func, select
from schemas import PageMeta, dump

T = TypeVar("T")

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 100
MAX_LIMIT = 100


class Page(BaseModel, Generic[T]):
    """One page of query results"""

    items: List[T]
    total: int
    page: int
    limit: int

    @property
    def total_pages(self) -> int:
        return ceil(self.total / self.limit) if self.limit else 0

    def meta(self) -> dict:
        """Pagination metadata in response form"""
        return dump(PageMeta(
            total=self.total,
            total_pages=self.total_pages,
            current_page=self.page,
            count=len(self.items),
        ))


def count_rows(session: Session, model, clauses: Sequence = ()) -> int:
    """COUNT(*) over a model with optional WHERE clauses"""
    statement = select(func.count()).select_from(model)
    if clauses:
        statement = statement.where(*clauses)
    return session.exec(statement).one()


def fetch_page(
    session: Session,
    model,
    clauses: Sequence,
    order_by: Sequence,
    page: int = DEFAULT_PAGE,
    limit: int = DEFAULT_LIMIT,
) -> Page:
    """
    Run a filtered, ordered query and return one page of it

    Args:
        session: Database session
        model: Table model to select
        clauses: WHERE clauses ANDed together
        order_by: ORDER BY clauses
        page: 1-based page number
        limit: Page size

    Returns:
        Page with the rows and the total row count
    """
    statement = select(model)
    if clauses:
        statement = statement.where(*clauses)
    statement = statement.order_by(*order_by).offset((page - 1) * limit).limit(limit)

    items = list(session.exec(statement).all())
    total = count_rows(session, model, clauses)
    return Page(items=items, total=total, page=page, limit=limit)
