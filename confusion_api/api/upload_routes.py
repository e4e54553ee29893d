from pathlib import Path
from typing import Any, Dict

from fastapi import APIRouter, Depends, File, Request, UploadFile
from fastapi.responses import FileResponse, JSONResponse

from confusion_api.auth.deps import get_cfg, require_admin
from confusion_api.auth.security import Claims
from confusion_api.config import Config
from confusion_api.errors import Forbidden, MalformedRequest, NotFound


FORM_FIELD = "imageFile"
ALLOWED_EXTENSIONS = (".jpg", ".jpeg", ".png", ".gif")


def _debug(msg: str) -> None:
    print(f"[api.uploads] {msg}")


router = APIRouter(tags=["uploads"])


def safe_image_name(filename: str | None) -> str:
    """Base name of an uploaded file; empty or non-image names are rejected."""
    name = Path((filename or "").replace("\\", "/")).name
    if not name or name in (".", ".."):
        raise MalformedRequest("filename_required")
    if Path(name).suffix.lower() not in ALLOWED_EXTENSIONS:
        raise MalformedRequest("You can upload only image files!")
    return name


@router.post("/imageUpload", status_code=201)
async def upload_image(
    imageFile: UploadFile = File(...),
    cfg: Config = Depends(get_cfg),
    _admin: Claims = Depends(require_admin),
) -> JSONResponse:
    name = safe_image_name(imageFile.filename)

    data = await imageFile.read(cfg.MAX_UPLOAD_BYTES + 1)
    if len(data) > cfg.MAX_UPLOAD_BYTES:
        raise MalformedRequest("file_too_large")

    images_dir = Path(cfg.PUBLIC_IMAGES_DIR)
    images_dir.mkdir(parents=True, exist_ok=True)
    (images_dir / name).write_bytes(data)
    _debug(f"Stored upload: {name} ({len(data)} bytes)")

    result: Dict[str, Any] = {
        "fieldname": FORM_FIELD,
        "originalname": imageFile.filename,
        "encoding": imageFile.headers.get("content-transfer-encoding", ""),
        "mimetype": imageFile.content_type or "",
        "destination": cfg.PUBLIC_IMAGES_DIR,
        "filename": name,
        "path": f"{cfg.PUBLIC_IMAGES_DIR.rstrip('/')}/{name}",
        "size": len(data),
    }
    return JSONResponse(status_code=201, content=result)


@router.api_route("/imageUpload", methods=["GET", "PUT", "DELETE"])
def image_upload_not_supported(request: Request) -> None:
    raise Forbidden(f"{request.method} operation not supported on /imageUpload")


@router.get("/images/{image_name}")
def get_image(image_name: str, cfg: Config = Depends(get_cfg)) -> FileResponse:
    images_dir = Path(cfg.PUBLIC_IMAGES_DIR)
    path = images_dir / Path(image_name).name
    if Path(image_name).name != image_name or not path.is_file():
        raise NotFound()
    return FileResponse(path)
