"""Base service class with common functionality."""
from typing import TypeVar, Generic, Optional, List, Type
from datetime import datetime, UTC
from pydantic import BaseModel, ConfigDict
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from listly.config.settings import ListlySettings, get_settings
from listly.domain.errors import ErrorCode, ServiceError, ValidationError
from listly.utils.logger import get_logger
from listly.db.session import TransactionManager
from .access_guard import AccessGuard

# Generic type for service results
T = TypeVar("T")
M = TypeVar("M", bound=BaseModel)


class Result(BaseModel, Generic[T]):
    """Generic result type for service operations."""
    success: bool
    data: Optional[T] = None
    error: str = ""
    code: Optional[ErrorCode] = None
    suggestions: List[str] = []
    metadata: dict = {}

    # Allow arbitrary types (like SQLAlchemy models)
    model_config = ConfigDict(arbitrary_types_allowed=True)

    @classmethod
    def ok(cls, data: T, **metadata) -> 'Result[T]':
        """Create a successful result."""
        return cls(success=True, data=data, metadata=metadata)

    @classmethod
    def fail(
        cls,
        error: str,
        code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        suggestions: Optional[List[str]] = None
    ) -> 'Result[T]':
        """Create a failed result."""
        return cls(
            success=False,
            error=error or "Unknown error",
            code=code,
            suggestions=suggestions or []
        )

    @classmethod
    def from_error(cls, error: ServiceError) -> 'Result[T]':
        """Create a failed result from a ServiceError."""
        return cls(
            success=False,
            error=error.message,
            code=error.code,
            suggestions=error.suggestions,
            metadata=error.metadata
        )


class BaseService:
    """Base class for all services."""

    def __init__(
        self,
        session: Session,
        user_id: int,
        settings: Optional[ListlySettings] = None
    ):
        """
        Initialize the service.

        Args:
            session: Database session
            user_id: ID of the authenticated user making the request
            settings: Settings override (defaults to the cached settings)
        """
        self.session = session
        self.user_id = user_id
        self.settings = settings or get_settings()
        self.logger = get_logger(self.__class__.__name__)
        self.transaction = TransactionManager(session)
        self.guard = AccessGuard(session)

    def _log_action(
        self,
        action: str,
        status: str = "success",
        **kwargs
    ) -> None:
        """
        Log a service action.

        Args:
            action: Name of the action
            status: Status of the action
            **kwargs: Additional log data
        """
        self.logger.info(
            f"{action}: {status}",
            user_id=self.user_id,
            **kwargs
        )

    def _get_now(self) -> datetime:
        """Get current UTC datetime."""
        return datetime.now(UTC)

    def _parse(self, model: Type[M], **fields) -> M:
        """
        Build a pydantic input model, raising ValidationError on bad input.

        Args:
            model: Pydantic model class
            **fields: Raw field values

        Returns:
            The validated model
        """
        try:
            return model(**fields)
        except PydanticValidationError as e:
            messages = [err["msg"] for err in e.errors()]
            self.logger.debug("Input validation failed", errors=messages)
            raise ValidationError(
                "; ".join(messages) or "Invalid input",
                metadata={"fields": [".".join(map(str, err["loc"])) for err in e.errors()]}
            ) from None

    def _check_list_name(self, name: str) -> None:
        if len(name) > self.settings.MAX_LIST_NAME_LENGTH:
            raise ValidationError(
                f"List name must be {self.settings.MAX_LIST_NAME_LENGTH} characters or less"
            )

    def _handle_error(self, action: str, error: Exception) -> Result[T]:
        """
        Turn an exception raised during an action into a failed result.

        ServiceErrors keep their own code, integrity violations become
        CONFLICT and anything else is logged and reported as INTERNAL_ERROR.

        Args:
            action: Name of the action that failed
            error: The exception raised

        Returns:
            Failed result
        """
        if isinstance(error, ServiceError):
            self.logger.debug(
                "Action rejected",
                action=action,
                code=error.code.value,
                error=error.message
            )
            return Result.from_error(error)

        if isinstance(error, IntegrityError):
            self.logger.debug("Integrity error", action=action)
            return Result.fail("Resource already exists", code=ErrorCode.CONFLICT)

        self.logger.opt(exception=error).error("Action failed", action=action)
        return Result.fail(f"Failed to {action.replace('_', ' ')}")
