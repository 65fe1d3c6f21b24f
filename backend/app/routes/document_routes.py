"""
Document Routes Module
======================

Upload, list, download and delete documents kept in Supabase Storage.

Security:
- Reads and uploads require operator or higher
- Deletes require supervisor or higher
- Uploads, edits and deletes are audit logged
"""

from typing import Optional
from urllib.parse import quote

from fastapi import APIRouter, Depends, File, Form, Query, Response, UploadFile, status
from sqlalchemy.orm import Session

from app.core.dependencies.pagination import PageParams, get_page_params
from app.core.config import settings
from app.core.dependencies.rbac import require_operator, require_supervisor
from app.core.enums import DocumentType
from app.core.logging import audit_logger, get_logger
from app.db.session import get_db
from app.models.profile import UserProfile
from app.schemas import COMMON_RESPONSES, ErrorResponse, Page
from app.schemas.document import DocumentResponse, DocumentUpdate, DocumentUrlResponse
from app.services.document_service import DocumentService
from app.services.supabase_client import SupabaseStorageClient, get_storage_client

# Initialize logger
logger = get_logger(__name__)


# =====================================
# Router Setup
# =====================================

router = APIRouter(
    prefix="/documents",
    tags=["Documents"],
    responses=COMMON_RESPONSES,
)


def get_document_service(
    db: Session = Depends(get_db),
    storage: SupabaseStorageClient = Depends(get_storage_client),
) -> DocumentService:
    return DocumentService(db, storage)


# =====================================
# Document Endpoints
# =====================================

@router.get(
    "",
    response_model=Page[DocumentResponse],
    summary="List Documents",
    description="List documents, newest first, optionally searching by name or type.",
)
def list_documents(
    search: Optional[str] = Query(None, description="Name or document type"),
    paging: PageParams = Depends(get_page_params),
    current_user: UserProfile = Depends(require_operator),
    service: DocumentService = Depends(get_document_service),
) -> Page[DocumentResponse]:
    rows, total = service.list_documents(search, paging.page, paging.page_size)
    return Page[DocumentResponse](
        items=[DocumentResponse.model_validate(row) for row in rows],
        total=total,
        page=paging.page,
        page_size=paging.page_size,
    )


@router.get(
    "/{document_id}",
    response_model=DocumentResponse,
    summary="Get Document",
    responses={404: {"model": ErrorResponse, "description": "Document not found"}},
)
def get_document(
    document_id: int,
    current_user: UserProfile = Depends(require_operator),
    service: DocumentService = Depends(get_document_service),
) -> DocumentResponse:
    return DocumentResponse.model_validate(service.get_document(document_id))


@router.post(
    "",
    response_model=DocumentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Upload Document",
    description="""
    Upload a file as multipart form data.

    - `titulo` defaults to the file name
    - Files larger than `MAX_UPLOAD_BYTES` are rejected
    - At most one of `id_pessoa_fisica`, `id_entidade`, `id_veiculo`, `id_seguro`
    """,
    responses={502: {"model": ErrorResponse, "description": "Storage failure"}},
)
def upload_document(
    file: UploadFile = File(..., description="File to store"),
    tipo_documento: DocumentType = Form(..., description="Document type"),
    titulo: Optional[str] = Form(None, description="Display name"),
    observacoes: Optional[str] = Form(None, description="Notes"),
    id_pessoa_fisica: Optional[int] = Form(None),
    id_entidade: Optional[int] = Form(None),
    id_veiculo: Optional[int] = Form(None),
    id_seguro: Optional[int] = Form(None),
    current_user: UserProfile = Depends(require_operator),
    service: DocumentService = Depends(get_document_service),
) -> DocumentResponse:
    # One byte past the limit is enough to reject the file
    content = file.file.read(settings.MAX_UPLOAD_BYTES + 1)
    document = service.upload_document(
        file_name=file.filename or "arquivo",
        content=content,
        content_type=file.content_type,
        tipo_documento=tipo_documento,
        titulo=titulo,
        observacoes=observacoes,
        associations={
            "id_pessoa_fisica": id_pessoa_fisica,
            "id_entidade": id_entidade,
            "id_veiculo": id_veiculo,
            "id_seguro": id_seguro,
        },
    )
    audit_logger.log_record_created("document", document.id_arquivo, str(current_user.id))
    return DocumentResponse.model_validate(document)


@router.put(
    "/{document_id}",
    response_model=DocumentResponse,
    summary="Update Document",
    description="""
    Edit the metadata of a document. The stored file is not changed.

    - At most one of `id_pessoa_fisica`, `id_entidade`, `id_veiculo`, `id_seguro`
    - Association ids left out are cleared
    """,
    responses={404: {"model": ErrorResponse, "description": "Document not found"}},
)
def update_document(
    document_id: int,
    payload: DocumentUpdate,
    current_user: UserProfile = Depends(require_operator),
    service: DocumentService = Depends(get_document_service),
) -> DocumentResponse:
    document = service.update_document(document_id, payload)
    audit_logger.log_record_updated("document", document_id, str(current_user.id))
    return DocumentResponse.model_validate(document)


@router.get(
    "/{document_id}/download",
    summary="Download Document",
    description="Stream the stored file.",
    response_class=Response,
    responses={
        200: {"description": "File content"},
        404: {"model": ErrorResponse, "description": "Document not found"},
    },
)
def download_document(
    document_id: int,
    current_user: UserProfile = Depends(require_operator),
    service: DocumentService = Depends(get_document_service),
) -> Response:
    document, content, media_type = service.download_document(document_id)
    return Response(
        content=content,
        media_type=media_type,
        headers={
            "Content-Disposition": f"attachment; filename*=UTF-8''{quote(document.nome_arquivo)}",
        },
    )


@router.get(
    "/{document_id}/url",
    response_model=DocumentUrlResponse,
    summary="Get Document URL",
    description="Public URL of the stored file.",
    responses={404: {"model": ErrorResponse, "description": "Document not found"}},
)
def get_document_url(
    document_id: int,
    current_user: UserProfile = Depends(require_operator),
    service: DocumentService = Depends(get_document_service),
) -> DocumentUrlResponse:
    return DocumentUrlResponse(id_arquivo=document_id, url=service.public_url(document_id))


@router.delete(
    "/{document_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete Document",
    description="Remove the stored file and the document record. Requires supervisor role.",
    responses={404: {"model": ErrorResponse, "description": "Document not found"}},
)
def delete_document(
    document_id: int,
    current_user: UserProfile = Depends(require_supervisor),
    service: DocumentService = Depends(get_document_service),
) -> None:
    service.delete_document(document_id)
    audit_logger.log_record_deleted("document", document_id, str(current_user.id))
