"""Course catalog: modules, levels, subtopics and subtopic content."""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from lms.api.dependencies import CurrentUser, RequestRepos, require_role
from lms.api.errors import method_not_allowed
from lms.api.schemas import (
    ContentRefOut,
    LevelOut,
    ModuleDetailOut,
    ModuleOut,
    SubTopicIn,
    SubTopicOut,
    SubTopicPatchIn,
)
from lms.models.catalog import SubTopic
from lms.models.principal import ROLE_MASTER_PRACTITIONER, Principal

logger = logging.getLogger(__name__)

router = APIRouter(tags=["catalog"])

Author = Annotated[Principal, Depends(require_role(ROLE_MASTER_PRACTITIONER))]


@router.get("/modules", response_model=list[ModuleOut])
async def list_modules(_principal: CurrentUser, repos: RequestRepos) -> list[ModuleOut]:
    return [ModuleOut.of(m) for m in await repos.catalog.list_modules()]


@router.get("/modules/{module_id}", response_model=ModuleDetailOut)
async def get_module(
    module_id: str, _principal: CurrentUser, repos: RequestRepos
) -> ModuleDetailOut:
    module = await repos.catalog.get_module(module_id)
    if module is None:
        raise HTTPException(status_code=404, detail="Module not found")
    levels = await repos.catalog.list_levels(module_id)
    return ModuleDetailOut(
        **ModuleOut.of(module).model_dump(),
        levels=[LevelOut.of(lv) for lv in levels],
    )


@router.delete("/levels/{level_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_level(level_id: str, principal: Author, repos: RequestRepos) -> Response:
    if not await repos.catalog.delete_level(level_id):
        raise HTTPException(status_code=404, detail="Level not found")
    logger.info("Level deleted id=%s by user=%s", level_id, principal.user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# --- Sub-topics ---


@router.get("/sub-topics", response_model=list[SubTopicOut])
async def list_sub_topics(
    _principal: CurrentUser,
    repos: RequestRepos,
    level_id: Annotated[str, Query(alias="levelId")],
) -> list[SubTopicOut]:
    out = []
    for st in await repos.catalog.list_sub_topics(level_id):
        contents = await repos.catalog.list_published_contents(st.id)
        out.append(SubTopicOut.of(st, contents))
    return out


@router.post(
    "/sub-topics",
    response_model=SubTopicOut,
    status_code=status.HTTP_201_CREATED,
)
async def create_sub_topic(
    payload: SubTopicIn, principal: Author, repos: RequestRepos
) -> SubTopicOut:
    if await repos.catalog.get_level(payload.level_id) is None:
        raise HTTPException(status_code=404, detail="Level not found")
    sub_topic = SubTopic.new(
        level_id=payload.level_id,
        title=payload.title,
        description=payload.description,
        order_index=payload.order_index,
        estimated_duration=payload.estimated_duration,
        learning_objectives=payload.learning_objectives,
    )
    await repos.catalog.add_sub_topic(sub_topic)
    logger.info("Sub-topic created id=%s by user=%s", sub_topic.id, principal.user_id)
    return SubTopicOut.of(sub_topic)


@router.get("/sub-topics/{sub_topic_id}", response_model=SubTopicOut)
async def get_sub_topic(
    sub_topic_id: str, _principal: CurrentUser, repos: RequestRepos
) -> SubTopicOut:
    sub_topic = await repos.catalog.get_sub_topic(sub_topic_id)
    if sub_topic is None:
        raise HTTPException(status_code=404, detail="Sub-topic not found")
    contents = await repos.catalog.list_published_contents(sub_topic_id)
    return SubTopicOut.of(sub_topic, contents)


@router.put("/sub-topics/{sub_topic_id}", response_model=SubTopicOut)
async def update_sub_topic(
    sub_topic_id: str,
    payload: SubTopicPatchIn,
    principal: Author,
    repos: RequestRepos,
) -> SubTopicOut:
    updated = await repos.catalog.update_sub_topic(sub_topic_id, payload.changes())
    if updated is None:
        raise HTTPException(status_code=404, detail="Sub-topic not found")
    logger.info("Sub-topic updated id=%s by user=%s", sub_topic_id, principal.user_id)
    return SubTopicOut.of(updated)


@router.delete("/sub-topics/{sub_topic_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_sub_topic(
    sub_topic_id: str, principal: Author, repos: RequestRepos
) -> Response:
    if not await repos.catalog.delete_sub_topic(sub_topic_id):
        raise HTTPException(status_code=404, detail="Sub-topic not found")
    logger.info("Sub-topic deleted id=%s by user=%s", sub_topic_id, principal.user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.api_route(
    "/sub-topics/{sub_topic_id}",
    methods=["POST", "PATCH"],
    include_in_schema=False,
)
async def sub_topic_unsupported(sub_topic_id: str) -> Response:
    return method_not_allowed(["GET", "PUT", "DELETE"])


# --- Content ---


@router.get("/content/{content_id}", response_model=ContentRefOut)
async def get_content(
    content_id: str, _principal: CurrentUser, repos: RequestRepos
) -> ContentRefOut:
    content = await repos.catalog.get_content(content_id)
    if content is None:
        raise HTTPException(status_code=404, detail="Content not found")
    return ContentRefOut(id=content.id, sub_topic_id=content.sub_topic_id)
