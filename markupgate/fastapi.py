# fastapi.py
import json
from fastapi import Depends, Request, HTTPException
from starlette.datastructures import UploadFile
from markupgate.models import FileDescriptor, SecurityPolicy
from markupgate.pipeline import GateDecision, check_content, check_upload
from markupgate.policy import DEFAULT_POLICY


class ContentSecurityDependency:
    """
    FastAPI dependency class that runs submitted markup through the content gate.

    Attributes:
        field (str): Name of the request field holding the markup or the uploaded file
        policy (SecurityPolicy): Policy the markup is checked against
    """

    def __init__(self, field: str, policy: SecurityPolicy):
        """
        Initialize the dependency with the field to read and the policy to apply.

        Args:
            field: Request field containing the markup
            policy: Security policy for validation and scanning
        """
        self.field = field
        self.policy = policy

    async def __call__(self, request: Request) -> GateDecision:
        """
        Execute the validation and scan pipeline for an incoming request.

        A text field goes through ``check_content``; an uploaded file goes
        through ``check_upload`` so its name and declared type are checked
        first. Unsafe content is reported through the returned decision and
        the route decides what response to send.

        Args:
            request: FastAPI request object

        Returns:
            GateDecision with the validator and scanner findings

        Raises:
            HTTPException: 400 for an unreadable body or upload, 422 when the
                field holds neither text nor a file
        """
        data = await read_submission(request)
        value = data.get(self.field, '')

        if isinstance(value, UploadFile):
            return await self._check_upload(value)
        if not isinstance(value, str):
            raise HTTPException(
                status_code=422,
                detail=f"Field '{self.field}' must be a string or a file",
            )
        return check_content(value, self.policy)

    async def _check_upload(self, upload: UploadFile) -> GateDecision:
        body = await upload.read()
        descriptor = FileDescriptor(
            name=upload.filename or '',
            content_type=upload.content_type or '',
            size=upload.size if upload.size is not None else len(body),
        )
        try:
            return check_upload(descriptor, body, self.policy)
        except UnicodeDecodeError:
            raise HTTPException(
                status_code=400,
                detail=f"Uploaded file '{descriptor.name}' is not valid UTF-8 text",
            )

async def read_submission(request: Request) -> dict:
    """
    Collect submitted fields from a JSON, urlencoded or multipart body.

    Any other content type yields no fields, as does a JSON body that is not
    an object. Multipart file parts come back as ``UploadFile`` values.

    Args:
        request: FastAPI request object

    Returns:
        dict: Field name to submitted value

    Raises:
        HTTPException: 400 when a JSON body cannot be decoded
    """
    content_type = request.headers.get('content-type', '')

    if content_type.startswith('application/json'):
        try:
            data = await request.json()
        except json.JSONDecodeError:
            raise HTTPException(status_code=400, detail="Request body is not valid JSON")
        return data if isinstance(data, dict) else {}

    if content_type.startswith(('application/x-www-form-urlencoded', 'multipart/form-data')):
        form_data = await request.form()
        return dict(form_data)

    return {}

def content_security_dependency(
    field: str = 'html_content',
    policy: SecurityPolicy = DEFAULT_POLICY
) -> Depends:
    """
    Create FastAPI dependency for markup submission checks.

    Usage:
    @app.post("/games")
    async def submit(decision: GateDecision = content_security_dependency("html_content")):
        if not decision.accepted:
            raise HTTPException(status_code=400, detail=decision.rejection())
        ...

    Args:
        field: Request field containing the markup or the uploaded file
        policy: Security policy

    Returns:
        FastAPI dependency
    """
    return Depends(ContentSecurityDependency(field, policy))
