"""
Error Handling Module
Categorizes conversion failures so entry points can pick a response and report them
"""

import logging
from typing import Dict, Any, List, Optional
from dataclasses import dataclass
from enum import Enum

from .exceptions import (
    ConversionError,
    DecodeError,
    DimensionError,
    PublishError,
    StagingError,
    ToolError,
    UnknownStrategyError,
)

logger = logging.getLogger(__name__)


class ErrorCategory(Enum):
    """Categories of conversion errors"""
    DIMENSION = "dimension"
    DECODE = "decode"
    STAGING = "staging"
    PUBLISH = "publish"
    TOOL = "tool"
    STRATEGY = "strategy"
    GENERAL = "general"


# HTTP-style status an entry point should answer with
STATUS_CODES = {
    ErrorCategory.DIMENSION: 413,
    ErrorCategory.DECODE: 415,
    ErrorCategory.STAGING: 500,
    ErrorCategory.PUBLISH: 500,
    ErrorCategory.TOOL: 502,
    ErrorCategory.STRATEGY: 400,
    ErrorCategory.GENERAL: 500,
}


@dataclass
class ProcessingError:
    """Structured representation of a conversion error"""
    category: ErrorCategory
    message: str
    file_path: str
    exception_type: str
    status_code: int
    exit_code: Optional[int] = None
    stderr: Optional[str] = None
    context: Optional[str] = None

    def get_short_description(self) -> str:
        """Get concise error description for logging"""
        return f"{self.category.value}: {self.message}"

    def get_detailed_description(self) -> str:
        base = f"Error in {self.file_path}: {self.message}"
        if self.context:
            base += f" (Context: {self.context})"
        if self.exit_code is not None:
            base += f"\nExit code: {self.exit_code}"
        if self.stderr:
            base += f"\nStderr:\n{self.stderr.strip()}"
        return base


class ErrorHandler:
    """Centralized error categorization for conversion requests"""

    def __init__(self):
        self.error_counts = {category: 0 for category in ErrorCategory}
        self.processed_errors: List[ProcessingError] = []

    def categorize_error(self, exception: Exception, file_path: str,
                         context: str = None) -> ProcessingError:
        """Categorize an exception into a structured ProcessingError"""
        # Order matters: PublishError is a StagingError
        if isinstance(exception, DimensionError):
            category = ErrorCategory.DIMENSION
        elif isinstance(exception, DecodeError):
            category = ErrorCategory.DECODE
        elif isinstance(exception, PublishError):
            category = ErrorCategory.PUBLISH
        elif isinstance(exception, StagingError):
            category = ErrorCategory.STAGING
        elif isinstance(exception, ToolError):
            category = ErrorCategory.TOOL
        elif isinstance(exception, UnknownStrategyError):
            category = ErrorCategory.STRATEGY
        else:
            category = ErrorCategory.GENERAL

        return ProcessingError(
            category=category,
            message=exception.message if isinstance(exception, ConversionError) else str(exception),
            file_path=file_path,
            exception_type=type(exception).__name__,
            status_code=STATUS_CODES[category],
            exit_code=getattr(exception, 'exit_code', None),
            stderr=getattr(exception, 'stderr', None),
            context=context
        )

    def handle_error(self, exception: Exception, file_path: str,
                     context: str = None) -> ProcessingError:
        """Handle an error by categorizing it and logging appropriately"""
        error = self.categorize_error(exception, file_path, context)
        self.processed_errors.append(error)
        self.error_counts[error.category] += 1

        if error.category in (ErrorCategory.DIMENSION, ErrorCategory.DECODE, ErrorCategory.STRATEGY):
            # Client-side problems
            logger.warning(f"Rejected: {error.get_short_description()}")
        else:
            logger.error(f"ERROR: {error.get_short_description()}")
            logger.debug(f"Details: {error.get_detailed_description()}")

        return error

    def get_error_summary(self) -> Dict[str, Any]:
        """Get error summary across handled requests"""
        total_errors = len(self.processed_errors)
        if total_errors == 0:
            return {'total_errors': 0, 'categories': {}}

        category_counts = {cat.value: count for cat, count in self.error_counts.items() if count > 0}
        return {
            'total_errors': total_errors,
            'categories': category_counts,
            'most_common_category': max(category_counts.items(), key=lambda x: x[1])[0],
            'client_errors': sum(1 for e in self.processed_errors if e.status_code < 500),
            'server_errors': sum(1 for e in self.processed_errors if e.status_code >= 500)
        }

    def reset(self):
        self.error_counts = {category: 0 for category in ErrorCategory}
        self.processed_errors.clear()
