"""Argument models for the browser tools.

Each handler validates its own payload with one of these models; the
dispatcher never inspects arguments.
"""
from typing import Any, Literal, Optional, Type, TypeVar
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from real_browser_mcp.exceptions import ToolInputError

ArgsT = TypeVar("ArgsT", bound="ToolArgs")


class ToolArgs(BaseModel):
    """Base for tool arguments: camelCase on the wire, snake_case in Python."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


def parse_arguments(model: Type[ArgsT], arguments: Any, tool_name: str) -> ArgsT:
    """Validate a raw arguments mapping.

    Raises:
        ToolInputError: With the first validation problem in the message
    """
    if arguments is None:
        arguments = {}
    if not isinstance(arguments, dict):
        raise ToolInputError(f"Arguments for {tool_name} must be an object", tool_name=tool_name)
    try:
        return model.model_validate(arguments)
    except ValidationError as e:
        first = e.errors()[0]
        param = ".".join(str(part) for part in first.get("loc", ())) or None
        prefix = f"Invalid argument '{param}'" if param else "Invalid arguments"
        raise ToolInputError(
            f"{prefix} for {tool_name}: {first.get('msg')}",
            param_name=param,
            tool_name=tool_name,
            details={"errors": e.errors(include_url=False)},
        ) from e


class Viewport(BaseModel):
    width: int = Field(1280, gt=0)
    height: int = Field(720, gt=0)


class BrowserInitArgs(ToolArgs):
    headless: Optional[bool] = None
    proxy: Optional[str] = None
    executable_path: Optional[str] = Field(None, alias="executablePath")
    user_agent: Optional[str] = Field(None, alias="userAgent")
    viewport: Optional[Viewport] = None
    content_priority: bool = Field(True, alias="contentPriority")


class NavigateArgs(ToolArgs):
    url: str
    wait_until: Literal["load", "domcontentloaded", "networkidle", "commit"] = Field(
        "domcontentloaded", alias="waitUntil"
    )

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        parsed = urlparse(v.strip())
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError(f"Invalid URL: {v!r}. Expected an absolute http(s) URL")
        return v.strip()


class GetContentArgs(ToolArgs):
    type: Literal["html", "text"] = "html"
    selector: Optional[str] = None


class ClickArgs(ToolArgs):
    selector: str = Field(..., min_length=1)
    wait_for_navigation: bool = Field(False, alias="waitForNavigation")


class TypeArgs(ToolArgs):
    selector: str = Field(..., min_length=1)
    text: str
    delay: int = Field(100, ge=0)


class WaitArgs(ToolArgs):
    type: Literal["selector", "navigation", "timeout"]
    value: str
    timeout: int = Field(30000, gt=0)


class SolveCaptchaArgs(ToolArgs):
    type: Literal["recaptcha", "hCaptcha", "turnstile"]


class FindSelectorArgs(ToolArgs):
    text: str = Field(..., min_length=1)
    element_type: str = Field("*", alias="elementType")
    exact: bool = False


class FormatOptions(BaseModel):
    model_config = ConfigDict(populate_by_name=True)
    include_metadata: bool = Field(True, alias="includeMetadata")
    cleanup_whitespace: bool = Field(True, alias="cleanupWhitespace")


class SaveContentAsMarkdownArgs(ToolArgs):
    file_path: str = Field(..., alias="filePath")
    content_type: Literal["text", "html"] = Field("text", alias="contentType")
    selector: Optional[str] = None
    format_options: FormatOptions = Field(default_factory=FormatOptions, alias="formatOptions")

    @field_validator("file_path")
    @classmethod
    def validate_extension(cls, v: str) -> str:
        if not v.lower().endswith(".md"):
            raise ValueError("filePath must end with .md")
        return v
