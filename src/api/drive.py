from typing import List, Optional
from urllib.parse import urlencode

from fastapi import FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, RedirectResponse
from pydantic import BaseModel

from src.config.logging_config import setup_logger
from src.config.settings import APP_TITLE, config, validate_env_for_app
from src.services.drive import DriveProxyService, GoogleDriveConnector
from src.services.drive.errors import DriveServiceError, InvalidArgument, ProviderUnavailable
from src.services.drive.models import FileReference

logger = setup_logger(__name__)


class CreateFileRequest(BaseModel):
    """Body for POST /files"""
    name: str
    content: str = ""


class UpdateContentRequest(BaseModel):
    """Body for PUT /files/{file_id}/content"""
    content: str


class FileReferenceResponse(BaseModel):
    id: str
    name: str
    mimeType: str
    modifiedTime: Optional[str] = None


class FileContentResponse(BaseModel):
    id: str
    name: str
    content: str


class UserResponse(BaseModel):
    id: str
    name: str
    email: str


class AuthStatusResponse(BaseModel):
    isAuthenticated: bool
    user: Optional[UserResponse] = None


class AuthUrlResponse(BaseModel):
    url: str


class SuccessResponse(BaseModel):
    success: bool = True


def _frontend_redirect(**params: str) -> RedirectResponse:
    """Redirect back to the browser app, optionally with query params for the sign-in gate."""
    target = config.FRONTEND_URL or "/"
    if params:
        sep = "&" if "?" in target else "?"
        target = f"{target}{sep}{urlencode(params)}"
    return RedirectResponse(target, status_code=302)


def _file_response(ref: FileReference) -> FileReferenceResponse:
    return FileReferenceResponse(**ref.to_dict())


def create_app(service: Optional[DriveProxyService] = None) -> FastAPI:
    """
    Build the proxy API.

    - **service**: proxy to serve; when omitted the environment is validated
      (missing settings abort startup) and a Google-backed proxy is created.
    """
    if service is None:
        validate_env_for_app()
        service = DriveProxyService(GoogleDriveConnector())

    app = FastAPI(title=APP_TITLE)
    app.state.drive = service

    # Credentialed requests from the single configured browser origin.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[config.FRONTEND_URL] if config.FRONTEND_URL else [],
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["*"],
    )

    @app.exception_handler(DriveServiceError)
    async def drive_error_handler(request: Request, exc: DriveServiceError):
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        fields = ", ".join(".".join(str(p) for p in err.get("loc", ())) for err in exc.errors())
        err = InvalidArgument(f"Malformed request: {fields}" if fields else "Malformed request")
        return JSONResponse(status_code=err.status_code, content=err.to_dict())

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        err = DriveServiceError("Internal error")
        return JSONResponse(status_code=err.status_code, content=err.to_dict())

    # ------------------------------------------------------------------
    # Auth
    # ------------------------------------------------------------------

    @app.get("/auth/google/url", response_model=AuthUrlResponse)
    def auth_url():
        """Consent URL the browser should navigate to"""
        logger.info("Generating Google OAuth URL")
        return AuthUrlResponse(url=service.begin_auth())

    @app.get("/auth/google/callback")
    def auth_callback(code: Optional[str] = None, error: Optional[str] = None):
        """
        Provider redirect target: exchange the one-time code, then send the
        browser back to the client. Failures land on the sign-in gate.
        """
        if error:
            logger.warning("Authorization denied by provider: %s", error)
            return _frontend_redirect(auth_error=error)
        try:
            service.complete_auth(code or "")
        except DriveServiceError as e:
            return _frontend_redirect(auth_error=e.kind)
        return _frontend_redirect()

    @app.post("/auth/logout", response_model=SuccessResponse)
    def logout():
        service.sign_out()
        return SuccessResponse()

    @app.get("/api/auth/status", response_model=AuthStatusResponse)
    def auth_status():
        try:
            return service.auth_status()
        except DriveServiceError as e:
            logger.error("Auth status lookup failed: %s", e.kind)
            status_code = 503 if isinstance(e, ProviderUnavailable) else 502
            return JSONResponse(
                status_code=status_code,
                content={"isAuthenticated": False, "user": None, **e.to_dict()},
            )

    # ------------------------------------------------------------------
    # Files
    # ------------------------------------------------------------------

    @app.get("/files", response_model=List[FileReferenceResponse])
    def list_files(mime_type: Optional[str] = Query(None, alias="mimeType")):
        """Files visible to the app, trashed entries excluded, provider order kept"""
        return [_file_response(f) for f in service.list_files(mime_type=mime_type)]

    @app.get("/files/{file_id}/content", response_model=FileContentResponse)
    def get_content(file_id: str):
        return FileContentResponse(**service.get_content(file_id).to_dict())

    @app.post("/files", response_model=FileReferenceResponse)
    def create_file(request: CreateFileRequest):
        return _file_response(service.create_file(request.name, request.content))

    @app.put("/files/{file_id}/content", response_model=SuccessResponse)
    def update_content(file_id: str, request: UpdateContentRequest):
        service.update_content(file_id, request.content)
        return SuccessResponse()

    @app.delete("/files/{file_id}", response_model=SuccessResponse)
    def delete_file(file_id: str):
        service.delete_file(file_id)
        return SuccessResponse()

    @app.get("/health")
    async def health_check():
        """Health check endpoint"""
        return {"status": "healthy"}

    return app
