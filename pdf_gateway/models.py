"""
Request/response models for the PDF gateway.

GenerationRequest is the single typed shape both generation endpoints
funnel into. Defaults live here; the validator decides which variant
defaults apply before constructing it.
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, Field, field_validator


DEFAULT_TIMEOUT_MS = 30000
MAX_TIMEOUT_MS = 300000
DEFAULT_MARGIN = "12mm"
DEFAULT_FILENAME = "document.pdf"

# Viewport defaults differ per endpoint variant
POST_VIEWPORT_WIDTH = 1800
GET_VIEWPORT_WIDTH = 1440
DEFAULT_VIEWPORT_HEIGHT = 900
MAX_VIEWPORT_DIMENSION = 10000

_CSS_LENGTH = re.compile(r"^\d+(\.\d+)?(px|in|cm|mm)?$")


class PageFormat(str, Enum):
    """Paper sizes Chromium can export to."""
    LETTER = "Letter"
    LEGAL = "Legal"
    TABLOID = "Tabloid"
    LEDGER = "Ledger"
    A0 = "A0"
    A1 = "A1"
    A2 = "A2"
    A3 = "A3"
    A4 = "A4"
    A5 = "A5"
    A6 = "A6"


class WaitCondition(str, Enum):
    """When navigation counts as finished."""
    LOAD = "load"
    DOMCONTENTLOADED = "domcontentloaded"
    NETWORKIDLE = "networkidle"
    COMMIT = "commit"


# Puppeteer-style names still sent by older clients
WAIT_CONDITION_ALIASES = {
    "networkidle0": WaitCondition.NETWORKIDLE,
    "networkidle2": WaitCondition.NETWORKIDLE,
    "network-idle": WaitCondition.NETWORKIDLE,
}


class LayoutMode(str, Enum):
    """Paged export uses format/orientation/margins; dynamic uses the viewport width."""
    PAGED = "paged"
    DYNAMIC = "dynamic"


class PageMargins(BaseModel):
    """Four-sided page margins as CSS lengths. A bare number means pixels."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    top: str = DEFAULT_MARGIN
    right: str = DEFAULT_MARGIN
    bottom: str = DEFAULT_MARGIN
    left: str = DEFAULT_MARGIN

    @field_validator("top", "right", "bottom", "left", mode="before")
    @classmethod
    def validate_length(cls, v: Any) -> str:
        if isinstance(v, bool):
            raise ValueError("margin must be a CSS length")
        if isinstance(v, (int, float)):
            if v < 0:
                raise ValueError("margin must not be negative")
            return f"{v}px"
        if not isinstance(v, str) or not _CSS_LENGTH.match(v.strip()):
            raise ValueError("margin must be a length in px, in, cm or mm")
        return v.strip()

    def as_dict(self) -> Dict[str, str]:
        return {"top": self.top, "right": self.right, "bottom": self.bottom, "left": self.left}


ZERO_MARGINS = PageMargins(top="0mm", right="0mm", bottom="0mm", left="0mm")


@dataclass(frozen=True)
class ExportOptions:
    """Layout options handed to the rendering engine's PDF export."""

    print_background: bool = True
    page_format: Optional[str] = None
    landscape: bool = False
    margin: Dict[str, str] = field(default_factory=dict)
    width: Optional[str] = None

    def to_pdf_kwargs(self) -> Dict[str, Any]:
        """Keyword arguments for Playwright's page.pdf()."""
        kwargs: Dict[str, Any] = {
            "print_background": self.print_background,
            "landscape": self.landscape,
            "margin": dict(self.margin),
        }
        if self.page_format:
            kwargs["format"] = self.page_format
        if self.width:
            kwargs["width"] = self.width
        return kwargs


class GenerationRequest(BaseModel):
    """A fully defaulted PDF generation request."""

    model_config = ConfigDict(populate_by_name=True, extra="forbid", frozen=True)

    url: str = Field(..., min_length=1, description="Absolute http(s) URL to render")
    page_format: PageFormat = Field(PageFormat.A4, alias="format", description="Paper size")
    landscape: bool = Field(False, description="Landscape orientation")
    margin: PageMargins = Field(default_factory=PageMargins, description="Page margins")
    wait_until: WaitCondition = Field(
        WaitCondition.NETWORKIDLE,
        alias="waitUntil",
        description="When navigation is considered complete"
    )
    timeout: int = Field(
        DEFAULT_TIMEOUT_MS,
        gt=0,
        le=MAX_TIMEOUT_MS,
        description="Navigation timeout in milliseconds"
    )
    viewport_width: int = Field(
        POST_VIEWPORT_WIDTH, gt=0, le=MAX_VIEWPORT_DIMENSION, alias="viewportWidth"
    )
    viewport_height: int = Field(
        DEFAULT_VIEWPORT_HEIGHT, gt=0, le=MAX_VIEWPORT_DIMENSION, alias="viewportHeight"
    )
    print_background: bool = Field(True, alias="printBackground")
    layout: LayoutMode = Field(LayoutMode.PAGED, description="paged or dynamic sizing")
    filename: Optional[str] = Field(None, description="Suggested download filename")

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        v = v.strip()
        parsed = urlparse(v)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError("URL must be an absolute http:// or https:// address")
        return v

    @field_validator("page_format", mode="before")
    @classmethod
    def normalize_page_format(cls, v: Any) -> Any:
        if isinstance(v, str):
            for member in PageFormat:
                if member.value.lower() == v.strip().lower():
                    return member
        return v

    @field_validator("wait_until", mode="before")
    @classmethod
    def normalize_wait_until(cls, v: Any) -> Any:
        if isinstance(v, str):
            key = v.strip().lower()
            return WAIT_CONDITION_ALIASES.get(key, key)
        return v

    @field_validator("layout", mode="before")
    @classmethod
    def normalize_layout(cls, v: Any) -> Any:
        return v.strip().lower() if isinstance(v, str) else v

    def export_options(self) -> ExportOptions:
        """Build engine export options for the requested layout mode."""
        if self.layout == LayoutMode.DYNAMIC:
            # Explicit pixel width matching the viewport, automatic height
            return ExportOptions(
                print_background=self.print_background,
                landscape=False,
                margin=ZERO_MARGINS.as_dict(),
                width=f"{self.viewport_width}px",
            )
        return ExportOptions(
            print_background=self.print_background,
            page_format=self.page_format.value,
            landscape=self.landscape,
            margin=self.margin.as_dict(),
        )


@dataclass
class RenderedDocument:
    """PDF bytes produced for exactly one request."""

    content: bytes
    filename: str = DEFAULT_FILENAME

    @property
    def size(self) -> int:
        return len(self.content)


# ============================================================================
# Response models
# ============================================================================

class HealthResponse(BaseModel):
    """Health check response."""
    status: str = "ok"
    service: str = "pdf-gateway"


class DebugResponse(BaseModel):
    """
    Diagnostic snapshot. Operationally sensitive, not a stable API.

    Serialized with the camelCase keys existing monitoring checks read.
    """
    model_config = ConfigDict(populate_by_name=True)

    has_api_key: bool = Field(..., alias="hasApiKey")
    api_key_length: int = Field(..., alias="apiKeyLength")
    header: str = Field(..., alias="headers")
    query: str
    viewport_width: int = Field(..., alias="viewportWidth")
    environment: str


class ErrorResponse(BaseModel):
    """JSON body returned for every failure."""
    error: str
    code: str
    message: Optional[str] = None
    stack: Optional[str] = None
