"""
Document Service Module
=======================

Document upload, download and removal. File content lives in Supabase
Storage; ``Arquivos`` holds the metadata and the storage path.
"""

import os
import uuid
from typing import Dict, List, Optional, Tuple

from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.enums import DocumentType
from app.core.exceptions import InbmException, NotFoundError, ValidationError
from app.core.logging import get_logger
from app.core.query.query_filter import QueryFilter, paginate
from app.db.errors import commit_or_raise
from app.models.client import Client
from app.models.document import Document
from app.models.organization import Organization
from app.models.policy import InsurancePolicy
from app.models.vehicle import Vehicle
from app.schemas.document import DocumentUpdate
from app.services.supabase_client import SupabaseStorageClient

# Initialize logger
logger = get_logger(__name__)

STORAGE_FOLDER = "documentos"

# Association column -> (model, label)
ASSOCIATIONS = {
    "id_pessoa_fisica": (Client, "Client"),
    "id_entidade": (Organization, "Organization"),
    "id_veiculo": (Vehicle, "Vehicle"),
    "id_seguro": (InsurancePolicy, "Insurance policy"),
}


def build_storage_path(file_name: str) -> str:
    """Random object path keeping the original extension."""
    ext = os.path.splitext(file_name)[1].lower()
    return f"{STORAGE_FOLDER}/{uuid.uuid4()}{ext}"


class DocumentService:
    """
    Document operations.

    Usage:
        service = DocumentService(db, storage)
        document = service.upload_document(...)
    """

    def __init__(self, db: Session, storage: SupabaseStorageClient):
        self.db = db
        self.storage = storage

    def list_documents(
        self,
        search: Optional[str],
        page: int,
        page_size: int,
    ) -> Tuple[List[Document], int]:
        query = (
            QueryFilter(self.db.query(Document))
            .search([Document.nome_arquivo, Document.tipo_documento], search)
            .build()
            .order_by(Document.data_upload.desc(), Document.id_arquivo.desc())
        )
        return paginate(query, page, page_size)

    def get_document(self, document_id: int) -> Document:
        document = self.db.get(Document, document_id)
        if document is None:
            raise NotFoundError(resource="Document", identifier=str(document_id))
        return document

    def upload_document(
        self,
        file_name: str,
        content: bytes,
        content_type: Optional[str],
        tipo_documento: DocumentType,
        titulo: Optional[str] = None,
        observacoes: Optional[str] = None,
        associations: Optional[Dict[str, Optional[int]]] = None,
    ) -> Document:
        """
        Store a file and register it.

        Raises:
            ValidationError: If the file is empty or too large, or the
                association is invalid
            UpstreamServiceError: If the storage upload fails
        """
        if not content:
            raise ValidationError("The file is empty", field="file")
        if len(content) > settings.MAX_UPLOAD_BYTES:
            raise ValidationError(
                "The file exceeds the maximum upload size",
                field="file",
                details={"max_bytes": settings.MAX_UPLOAD_BYTES},
            )

        links = self._check_associations(associations or {})

        path = build_storage_path(file_name)
        self.storage.upload(path, content, content_type)

        document = Document(
            nome_arquivo=(titulo or "").strip() or file_name,
            tipo_documento=tipo_documento.value,
            caminho_armazenamento=path,
            mime_type=content_type,
            tamanho_bytes=len(content),
            observacoes=(observacoes or "").strip() or None,
            **links,
        )
        self.db.add(document)

        try:
            commit_or_raise(self.db, "Document")
        except Exception:
            self._remove_stored(path, "Stored file removed after failed insert")
            raise

        self.db.refresh(document)
        logger.info(
            "Document uploaded",
            document_id=document.id_arquivo,
            size=document.tamanho_bytes,
            association=document.tipo_associacao,
        )
        return document

    def update_document(self, document_id: int, data: DocumentUpdate) -> Document:
        """
        Edit title, type, notes and association of a document.

        Raises:
            NotFoundError: If the document does not exist
            ValidationError: If more than one association is given or the
                associated record does not exist
        """
        document = self.get_document(document_id)
        links = self._check_associations({key: getattr(data, key) for key in ASSOCIATIONS})

        document.nome_arquivo = data.titulo
        document.tipo_documento = data.tipo_documento.value
        document.observacoes = data.observacoes
        for key in ASSOCIATIONS:
            setattr(document, key, links.get(key))

        commit_or_raise(self.db, "Document")
        self.db.refresh(document)

        logger.info(
            "Document updated",
            document_id=document_id,
            association=document.tipo_associacao,
        )
        return document

    def delete_document(self, document_id: int) -> None:
        """Remove the stored file, then the row. Storage failures do not block the delete."""
        document = self.get_document(document_id)
        self._remove_stored(document.caminho_armazenamento, "Stored file removed")

        self.db.delete(document)
        commit_or_raise(self.db, "Document", deleting=True)
        logger.info("Document deleted", document_id=document_id)

    def download_document(self, document_id: int) -> Tuple[Document, bytes, str]:
        document = self.get_document(document_id)
        content, content_type = self.storage.download(document.caminho_armazenamento)
        return document, content, document.mime_type or content_type

    def public_url(self, document_id: int) -> str:
        document = self.get_document(document_id)
        return self.storage.public_url(document.caminho_armazenamento)

    # --------------------------
    # Helpers
    # --------------------------

    def _check_associations(self, associations: Dict[str, Optional[int]]) -> Dict[str, int]:
        links = {key: value for key, value in associations.items() if value is not None}
        if len(links) > 1:
            raise ValidationError(
                "A document can be associated with only one record",
                field="associacao",
            )
        for key, value in links.items():
            model, label = ASSOCIATIONS[key]
            if self.db.get(model, value) is None:
                raise ValidationError(f"{label} not found", field=key)
        return links

    def _remove_stored(self, path: str, message: str) -> None:
        try:
            self.storage.remove([path])
            logger.info(message, path=path)
        except InbmException as e:
            logger.warning("Could not remove stored file", path=path, error=e.message)
