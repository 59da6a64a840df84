from __future__ import annotations

from dataclasses import dataclass
from uuid import uuid4


def new_id() -> str:
    return str(uuid4())


@dataclass(frozen=True, slots=True)
class Module:
    id: str
    title: str
    description: str = ""
    is_active: bool = True

    @staticmethod
    def new(*, title: str, description: str = "", is_active: bool = True) -> Module:
        return Module(
            id=new_id(), title=title, description=description, is_active=is_active
        )


@dataclass(frozen=True, slots=True)
class Level:
    id: str
    module_id: str
    title: str
    order_index: int = 0

    @staticmethod
    def new(*, module_id: str, title: str, order_index: int = 0) -> Level:
        return Level(
            id=new_id(), module_id=module_id, title=title, order_index=order_index
        )


@dataclass(frozen=True, slots=True)
class SubTopic:
    id: str
    level_id: str
    title: str
    description: str | None = None
    order_index: int = 0
    estimated_duration: int | None = None  # minutes
    learning_objectives: str | None = None
    is_active: bool = True

    @staticmethod
    def new(
        *,
        level_id: str,
        title: str,
        description: str | None = None,
        order_index: int = 0,
        estimated_duration: int | None = None,
        learning_objectives: str | None = None,
    ) -> SubTopic:
        return SubTopic(
            id=new_id(),
            level_id=level_id,
            title=title,
            description=description,
            order_index=order_index,
            estimated_duration=estimated_duration,
            learning_objectives=learning_objectives,
        )


# Fields a partial update may touch; anything else in a change set is ignored
SUB_TOPIC_MUTABLE_FIELDS = frozenset(
    {
        "title",
        "description",
        "order_index",
        "estimated_duration",
        "learning_objectives",
        "is_active",
    }
)


@dataclass(frozen=True, slots=True)
class SubTopicContent:
    id: str
    sub_topic_id: str
    title: str
    body: str = ""
    order_index: int = 0
    is_published: bool = True

    @staticmethod
    def new(
        *,
        sub_topic_id: str,
        title: str,
        body: str = "",
        order_index: int = 0,
        is_published: bool = True,
    ) -> SubTopicContent:
        return SubTopicContent(
            id=new_id(),
            sub_topic_id=sub_topic_id,
            title=title,
            body=body,
            order_index=order_index,
            is_published=is_published,
        )
