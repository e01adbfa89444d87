"""JSON response envelopes and error to status mapping."""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from newscms import config

logger = logging.getLogger(__name__)


class APIError(Exception):
    """An error that carries the HTTP status it answers with."""

    def __init__(self, message: str, status_code: int = 500):
        super().__init__(message)
        self.status_code = status_code


ERR_NOT_FOUND = APIError("resource not found", 404)
ERR_INVALID_PAGE = APIError("invalid page request", 404)
ERR_CONFLICT = APIError("data conflict or already exist", 409)
ERR_BAD_REQUEST = APIError("bad request, check param or body", 400)
ERR_INTERNAL_SERVER_ERROR = APIError("internal server error", 500)


class WrapErr(Exception):
    """Wraps another error with a status and an application error code."""

    def __init__(self, status_code: int, err_code: str, err: BaseException):
        super().__init__(str(err))
        self.status_code = status_code
        self.err_code = err_code
        self.err = err

    def __str__(self) -> str:
        return str(self.err)


@dataclass
class Response:
    """The envelope every endpoint answers with."""

    success: bool
    message: str = ""
    hash: Optional[str] = None
    count: Optional[int] = None
    page_size: Optional[int] = None
    previous_page: Optional[int] = None
    next_page: Optional[int] = None
    current_page: Optional[int] = None
    data: Any = None

    def to_dict(self) -> Dict[str, Any]:
        """Return the JSON body; empty message and unset fields are left out."""
        body: Dict[str, Any] = {"success": self.success}
        if self.message:
            body["message"] = self.message
        for key in ("hash", "count", "page_size", "previous_page",
                    "next_page", "current_page", "data"):
            value = getattr(self, key)
            if value is not None:
                body[key] = value
        return body


def get_status_code(err: BaseException) -> int:
    """Return the HTTP status an error answers with."""
    if isinstance(err, APIError):
        return err.status_code
    current: Optional[BaseException] = err
    while current is not None:
        if isinstance(current, WrapErr):
            return current.status_code
        current = current.__cause__
    return 500


def respond_error(err: BaseException, *args: BaseException) -> Tuple[int, Response]:
    """Log *err* and build the error answer; a further error overrides the message."""
    resp = Response(success=False, message=str(err))
    logged = str(err)
    if args:
        resp.message = str(args[0])
        logged = f"{err} : {args[0]}"
    status = get_status_code(err)
    if status == 500 and config.get().app.disable_500_err_msg_in_response:
        resp.message = str(ERR_INTERNAL_SERVER_ERROR)
    logger.error(logged)
    return status, resp


def respond_success(msg: str, data: Any) -> Tuple[int, Response]:
    return 200, Response(success=True, message=msg, data=data)


def respond_success_with_hash(msg: str, hash: str, data: Any) -> Tuple[int, Response]:
    return 200, Response(success=True, message=msg, hash=hash, data=data)


def respond_success_for_list(
    msg: str, count: int, page_size: int, cur_page: int, data: Any
) -> Tuple[int, Response]:
    """Build a paginated answer with links to the neighbouring pages."""
    prev_page = cur_page - 1 if cur_page > 1 else None
    next_page = cur_page + 1 if count > page_size * cur_page else None
    return 200, Response(
        success=True,
        message=msg,
        data=data,
        count=count,
        page_size=page_size,
        previous_page=prev_page,
        next_page=next_page,
        current_page=cur_page,
    )


def respond_created(msg: str, data: Any) -> Tuple[int, Response]:
    return 201, Response(success=True, message=msg, data=data)


def respond_success_with_no_content(msg: str) -> Tuple[int, Response]:
    return 200, Response(success=True, message=msg, data=None)