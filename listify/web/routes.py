"""
HTTP routes.

The ``{user_id}`` path segment mirrors the links rendered by the
templates; the identity in the session cookie is what every handler
acts on.  Mutations answer with a 303 redirect to ``/`` and an
``X-Rows-Affected`` header; zero means nothing matched.
"""

from __future__ import annotations

from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Form, Path, Request
from fastapi.responses import RedirectResponse, Response

from listify.auth import SessionManager
from listify.errors import NotFoundError
from listify.logger import get_logger
from listify.models.enums import Category
from listify.repositories.base_repository import MAX_ROW_ID
from listify.services import ServiceContainer
from listify.web.dependencies import get_services, get_session, require_user_id
from listify.web.templating import templates

router = APIRouter()
logger = get_logger("listify.web")

Services = Annotated[ServiceContainer, Depends(get_services)]
Session = Annotated[SessionManager, Depends(get_session)]
UserId = Annotated[int, Depends(require_user_id)]
RowId = Annotated[int, Path(ge=1, le=MAX_ROW_ID)]

ROWS_AFFECTED_HEADER: str = "X-Rows-Affected"


def _redirect_home(rows_affected: Optional[int] = None) -> RedirectResponse:
    response = RedirectResponse("/", status_code=303)
    if rows_affected is not None:
        response.headers[ROWS_AFFECTED_HEADER] = str(rows_affected)
    return response


async def _render_index(
    request: Request,
    services: ServiceContainer,
    session: SessionManager,
    active_list: Optional[Category] = None,
) -> Response:
    user_ref = session.user_id
    view = await services["category_view_service"].load_view(user_ref)
    if user_ref is not None and view.is_anonymous:
        logger.info("Clearing session bound to missing user %s.", user_ref)
        session.clear()

    context = view.to_template_context()
    context["active_list"] = active_list
    context["categories"] = list(Category)
    return templates.TemplateResponse(request, "index.html", context)


# ----------------------------------------------------------------------
# Pages and session
# ----------------------------------------------------------------------

@router.get("/")
async def index(request: Request, services: Services, session: Session) -> Response:
    return await _render_index(request, services, session)


@router.get("/login/{user_id}")
async def login(user_id: RowId, services: Services, session: Session) -> Response:
    user = await services["user_service"].find_user(user_id)
    if user is not None:
        session.bind(user.id)
        logger.info("Logged in as user %s.", user.id)
    return _redirect_home()


@router.get("/logout")
async def logout(session: Session) -> Response:
    session.clear()
    return _redirect_home()


@router.put("/user_id/add-task")
async def add_task(
    services: Services,
    session: Session,
    task: Annotated[str, Form()] = "",
) -> Response:
    await services["task_provisioning_service"].provision_task(session, task)
    return _redirect_home(rows_affected=1)


@router.get("/{user_id}")
async def user_page(user_id: str, request: Request, services: Services, session: Session) -> Response:
    return await _render_index(request, services, session)


@router.get("/{user_id}/{list_name}")
async def list_page(
    user_id: str,
    list_name: str,
    request: Request,
    services: Services,
    session: Session,
) -> Response:
    try:
        category = Category(list_name)
    except ValueError as exc:
        raise NotFoundError(f"Unknown list {list_name!r}", original_error=exc) from exc
    return await _render_index(request, services, session, active_list=category)


# ----------------------------------------------------------------------
# Mutations (authenticated)
# ----------------------------------------------------------------------

@router.post("/{user_id}")
async def update_profile(
    user_id: str,
    services: Services,
    current_user_id: UserId,
    new_name: Annotated[str, Form()] = "",
    new_email: Annotated[str, Form()] = "",
    new_password: Annotated[str, Form()] = "",
) -> Response:
    result = await services["user_service"].update_profile(
        current_user_id,
        full_name=new_name,
        email=new_email,
        password=new_password,
    )
    return _redirect_home(result.affected)


@router.post("/{user_id}/{task}/archive")
async def archive_task(
    user_id: str, task: RowId, services: Services, current_user_id: UserId,
) -> Response:
    result = await services["task_mutation_service"].archive_task(current_user_id, task)
    return _redirect_home(result.affected)


@router.post("/{user_id}/{task}/{category}")
async def move_task(
    user_id: str,
    task: RowId,
    category: Category,
    services: Services,
    current_user_id: UserId,
    new_category: Annotated[Category, Form(alias="new-category")],
) -> Response:
    result = await services["task_mutation_service"].move_category(
        current_user_id, category, new_category, task_id=task,
    )
    return _redirect_home(result.affected)


@router.post("/{user_id}/{task}")
async def edit_task(
    user_id: str,
    task: RowId,
    services: Services,
    current_user_id: UserId,
    new_description: Annotated[str, Form(alias="new-description")] = "",
) -> Response:
    result = await services["task_mutation_service"].edit_description(
        current_user_id, task, new_description,
    )
    return _redirect_home(result.affected)


@router.delete("/{user_id}/{task}/{category}")
async def delete_category(
    user_id: str, task: str, category: Category, services: Services, current_user_id: UserId,
) -> Response:
    result = await services["task_mutation_service"].delete_category(current_user_id, category)
    return _redirect_home(result.affected)


@router.delete("/{user_id}/{task}")
async def delete_task(
    user_id: str, task: RowId, services: Services, current_user_id: UserId,
) -> Response:
    result = await services["task_mutation_service"].delete_task(current_user_id, task)
    return _redirect_home(result.affected)


@router.delete("/{user_id}")
async def delete_user(
    user_id: str, services: Services, session: Session, current_user_id: UserId,
) -> Response:
    result = await services["user_service"].delete_user(current_user_id)
    session.clear()
    return _redirect_home(result.affected)
