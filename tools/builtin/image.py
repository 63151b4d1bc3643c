"""
Image Tools
-----------
image_info, image_resize and image_base64 use Pillow; vision and ocr need a
model provider and are stubs.
"""

from pathlib import Path
from typing import Any, Dict, List
import base64
import binascii
import io

from PIL import Image, UnidentifiedImageError

from infra.config import ToolSettings

from ..arguments import Arguments
from ..context import ExecutionContext
from ..registry import Category, Tool, stub_tool
from ..result import Result
from ..schema import bool_param, enum_param, integer_param, object_schema, string_param

MAX_DIMENSION = 10_000


def _open(path: Path) -> Image.Image:
    if not path.exists():
        raise FileNotFoundError(f"Image not found: {path}")
    try:
        return Image.open(path)
    except UnidentifiedImageError:
        raise ValueError(f"Not a recognized image: {path}") from None


def _exec_image_info(context: ExecutionContext, raw: Dict[str, Any]) -> Result:
    args = Arguments(raw)
    path = Path(args.get_str("path")).expanduser()

    try:
        with _open(path) as image:
            width, height = image.size
            info = {
                "path": str(path),
                "format": (image.format or "unknown").lower(),
                "mode": image.mode,
                "width": width,
                "height": height,
                "frames": getattr(image, "n_frames", 1),
                "size": path.stat().st_size,
            }
    except ValueError as e:
        return Result.from_error(e)

    return Result.ok(info)


def _exec_image_resize(context: ExecutionContext, raw: Dict[str, Any]) -> Result:
    args = Arguments(raw)
    source = Path(args.get_str("input")).expanduser()
    target = Path(args.get_str("output")).expanduser()
    width = args.get_int("width")
    height = args.get_int("height")
    keep_aspect = args.get_bool("keep_aspect", True)

    if not (0 < width <= MAX_DIMENSION and 0 < height <= MAX_DIMENSION):
        return Result.from_error(f"width and height must be between 1 and {MAX_DIMENSION}")

    try:
        with _open(source) as image:
            if keep_aspect:
                resized = image.copy()
                resized.thumbnail((width, height))
            else:
                resized = image.resize((width, height))
            target.parent.mkdir(parents=True, exist_ok=True)
            resized.save(target)
    except ValueError as e:
        return Result.from_error(e)

    return Result.ok_with_meta(
        {"path": str(target), "width": resized.width, "height": resized.height},
        {"source": str(source), "keep_aspect": keep_aspect},
    )


def _exec_image_base64(context: ExecutionContext, raw: Dict[str, Any]) -> Result:
    args = Arguments(raw)
    action = args.get_choice("action", ["encode", "decode"])
    path = Path(args.get_str("path")).expanduser()

    if action == "encode":
        try:
            with _open(path) as image:
                mime = Image.MIME.get(image.format or "", "application/octet-stream")
        except ValueError as e:
            return Result.from_error(e)

        content = path.read_bytes()
        encoded = base64.b64encode(content).decode("ascii")
        return Result.ok({
            "base64": encoded,
            "data_uri": f"data:{mime};base64,{encoded}",
            "mime_type": mime,
            "size": len(content),
        })

    data = args.get_str("data")
    if data.startswith("data:") and "," in data:
        data = data.split(",", 1)[1]

    try:
        content = base64.b64decode(data, validate=True)
        with Image.open(io.BytesIO(content)) as image:
            image_format = (image.format or "unknown").lower()
    except binascii.Error as e:
        return Result.from_error(ValueError(f"invalid base64: {e}"))
    except UnidentifiedImageError:
        return Result.from_error(ValueError("decoded data is not a recognized image"))

    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(content)
    return Result.ok({"path": str(path), "size": len(content), "format": image_format})


def build_tools(settings: ToolSettings) -> List[Tool]:
    return [
        Tool(
            name="image_info",
            description="Get image metadata including dimensions, format and color mode",
            category=Category.IMAGE,
            parameters=object_schema({
                "path": string_param("Path to image file"),
            }, required=["path"]),
            executor=_exec_image_info,
        ),
        Tool(
            name="image_resize",
            description="Resize an image, optionally keeping its aspect ratio",
            category=Category.IMAGE,
            parameters=object_schema({
                "input": string_param("Input image path"),
                "output": string_param("Output image path"),
                "width": integer_param("Target width in pixels", minimum=1, maximum=MAX_DIMENSION),
                "height": integer_param("Target height in pixels", minimum=1, maximum=MAX_DIMENSION),
                "keep_aspect": bool_param("Maintain aspect ratio", default=True),
            }, required=["input", "output", "width", "height"]),
            executor=_exec_image_resize,
        ),
        Tool(
            name="image_base64",
            description="Encode an image file to base64 or decode base64 into an image file",
            category=Category.IMAGE,
            parameters=object_schema({
                "action": enum_param("Action to perform", ["encode", "decode"]),
                "path": string_param("Image file path (read for encode, written for decode)"),
                "data": string_param("Base64 data or data URI (for decode)"),
            }, required=["action", "path"]),
            executor=_exec_image_base64,
        ),
        stub_tool(
            name="vision",
            description="Analyze an image with a vision model",
            category=Category.IMAGE,
            parameters=object_schema({
                "image": string_param("Image URL or base64-encoded image"),
                "prompt": string_param("Question or instruction about the image"),
                "detail": enum_param("Detail level", ["low", "high", "auto"]),
            }, required=["image"]),
            message="Image analysis requires a vision-capable model provider to be configured",
            requires_auth=True,
        ),
        stub_tool(
            name="ocr",
            description="Extract text from an image",
            category=Category.IMAGE,
            parameters=object_schema({
                "image": string_param("Image file path or base64-encoded image"),
                "language": string_param("OCR language code (e.g., 'eng', 'fra')"),
            }, required=["image"]),
            message="OCR requires an OCR engine (Tesseract) or cloud OCR API to be configured",
        ),
    ]
