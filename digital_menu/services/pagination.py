from typing import List, Optional, Tuple
from sqlalchemy import and_, or_
from sqlalchemy.orm import Query
from digital_menu.core.errors import BadRequest


def paginate(
    query: Query,
    model,
    order_column,
    limit: int,
    cursor: Optional[str] = None,
    descending: bool = False,
) -> Tuple[List, Optional[str]]:
    """
    Cursor pagination ordered by order_column, ties broken by id.

    The cursor is the id of the first row of the page. One extra row is
    fetched; if present, its id becomes next_cursor.
    """
    if descending:
        ordering = (order_column.desc(), model.id.desc())
    else:
        ordering = (order_column.asc(), model.id.asc())

    if cursor:
        anchor = query.filter(model.id == cursor).first()
        if anchor is None:
            raise BadRequest("Invalid cursor")

        value = getattr(anchor, order_column.key)
        if descending:
            query = query.filter(or_(
                order_column < value,
                and_(order_column == value, model.id <= anchor.id)
            ))
        else:
            query = query.filter(or_(
                order_column > value,
                and_(order_column == value, model.id >= anchor.id)
            ))

    items = query.order_by(*ordering).limit(limit + 1).all()

    next_cursor = None
    if len(items) > limit:
        next_cursor = items.pop().id

    return items, next_cursor
