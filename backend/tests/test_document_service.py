import uuid
from unittest.mock import patch

from sqlalchemy.exc import OperationalError

from app.repositories.document_repository import DocumentRepository
from app.services.document_service import DocumentErrorKind, DocumentService
from app.services.upload_gateway import IncomingFile

PDF = IncomingFile(filename="sick note.pdf", mime_type="application/pdf", content=b"%PDF-1.4" + b"0" * 2048)


def _db_error(statement="SELECT"):
    return OperationalError(statement, {}, Exception("database is locked"))


def _service(db, media_store):
    return DocumentService(DocumentRepository(db), media_store)


class TestUploadDocument:
    def test_upload_persists_record(self, db, media_store, make_user, make_leave_request):
        user = make_user()
        lr = make_leave_request(user)

        result = _service(db, media_store).upload_document(PDF, lr.id, user.id)

        assert result.success
        doc = result.data
        assert doc.leave_request_id == lr.id
        assert doc.uploaded_by_id == user.id
        assert doc.file_name == "sick_note.pdf"
        assert doc.mime_type == "application/pdf"
        assert media_store.uploads == [(doc.external_media_id, "document")]

    def test_missing_leave_request_skips_upload(self, db, media_store, make_user):
        user = make_user()
        result = _service(db, media_store).upload_document(PDF, str(uuid.uuid4()), user.id)

        assert not result.success
        assert result.error is DocumentErrorKind.NOT_FOUND
        assert result.message == "Leave request not found"
        assert media_store.uploads == []

    def test_leave_request_lookup_failure(self, db, media_store, make_user):
        with patch.object(DocumentRepository, "leave_request_exists", side_effect=_db_error()):
            result = _service(db, media_store).upload_document(PDF, str(uuid.uuid4()), make_user().id)

        assert result.error is DocumentErrorKind.LOOKUP_FAILED
        assert result.message.startswith("Failed to upload document")
        assert media_store.uploads == []

    def test_media_store_failure(self, db, media_store, make_user, make_leave_request):
        user = make_user()
        lr = make_leave_request(user)
        media_store.fail_uploads = True

        result = _service(db, media_store).upload_document(PDF, lr.id, user.id)

        assert result.error is DocumentErrorKind.UPLOAD_FAILED
        assert "quota exceeded" in result.message
        assert DocumentRepository(db).find_by_leave_request(lr.id) == []

    def test_persist_failure_leaves_remote_object(self, db, media_store, make_user, make_leave_request):
        user = make_user()
        lr = make_leave_request(user)
        service = _service(db, media_store)

        with patch.object(DocumentRepository, "create", side_effect=OperationalError("INSERT", {}, Exception("disk full"))):
            result = service.upload_document(PDF, lr.id, user.id)

        assert result.error is DocumentErrorKind.PERSIST_FAILED
        assert len(media_store.objects) == 1

    def test_identical_uploads_get_distinct_ids(self, db, media_store, make_user, make_leave_request):
        user = make_user()
        lr = make_leave_request(user)
        service = _service(db, media_store)

        first = service.upload_document(PDF, lr.id, user.id).data
        second = service.upload_document(PDF, lr.id, user.id).data
        assert first.external_media_id != second.external_media_id


class TestReadDocuments:
    def test_get_document(self, db, media_store, make_user, make_leave_request):
        user = make_user()
        lr = make_leave_request(user)
        service = _service(db, media_store)
        doc = service.upload_document(PDF, lr.id, user.id).data

        result = service.get_document(doc.id)
        assert result.success
        assert result.data.leave_request.id == lr.id

    def test_get_missing_document(self, db, media_store):
        result = _service(db, media_store).get_document(str(uuid.uuid4()))
        assert result.error is DocumentErrorKind.NOT_FOUND

    def test_empty_listing_is_success(self, db, media_store):
        result = _service(db, media_store).get_documents_by_leave_request(str(uuid.uuid4()))
        assert result.success
        assert result.data == []

    def test_document_lookup_failure(self, db, media_store):
        with patch.object(DocumentRepository, "find_by_id", side_effect=_db_error()):
            result = _service(db, media_store).get_document(str(uuid.uuid4()))
        assert result.error is DocumentErrorKind.LOOKUP_FAILED

    def test_listing_lookup_failure(self, db, media_store):
        with patch.object(DocumentRepository, "find_by_leave_request", side_effect=_db_error()):
            result = _service(db, media_store).get_documents_by_leave_request(str(uuid.uuid4()))
        assert result.error is DocumentErrorKind.LOOKUP_FAILED
        assert result.message.startswith("Failed to get documents")

    def test_thumbnail_for_document(self, db, media_store, make_user, make_leave_request):
        user = make_user()
        lr = make_leave_request(user)
        service = _service(db, media_store)
        doc = service.upload_document(PDF, lr.id, user.id).data

        result = service.get_thumbnail_url(doc.id)
        assert result.data.endswith("text=RAW")


class TestDeleteDocument:
    def _upload(self, db, media_store, uploader, lr):
        return _service(db, media_store).upload_document(PDF, lr.id, uploader.id).data

    def test_uploader_can_delete(self, db, media_store, make_user, make_leave_request):
        hr = make_user(role="HR_MANAGER")
        lr = make_leave_request(make_user())
        doc = self._upload(db, media_store, hr, lr)
        service = _service(db, media_store)

        doc_id, external_id = doc.id, doc.external_media_id

        result = service.delete_document(doc_id, hr.id)

        assert result.success
        assert media_store.deleted == [external_id]
        assert service.get_document(doc_id).error is DocumentErrorKind.NOT_FOUND

    def test_leave_request_owner_can_delete(self, db, media_store, make_user, make_leave_request):
        owner = make_user()
        hr = make_user(role="HR_MANAGER")
        lr = make_leave_request(owner)
        doc = self._upload(db, media_store, hr, lr)

        assert _service(db, media_store).delete_document(doc.id, owner.id).success

    def test_stranger_is_unauthorized(self, db, media_store, make_user, make_leave_request):
        owner = make_user()
        stranger = make_user(role="ADMIN")
        lr = make_leave_request(owner)
        doc = self._upload(db, media_store, owner, lr)
        service = _service(db, media_store)

        result = service.delete_document(doc.id, stranger.id)

        assert result.error is DocumentErrorKind.UNAUTHORIZED
        assert media_store.deleted == []
        assert service.get_document(doc.id).success

    def test_missing_document(self, db, media_store, make_user):
        result = _service(db, media_store).delete_document(str(uuid.uuid4()), make_user().id)
        assert result.error is DocumentErrorKind.NOT_FOUND

    def test_remote_delete_failure_still_removes_record(self, db, media_store, make_user, make_leave_request):
        user = make_user()
        lr = make_leave_request(user)
        doc = self._upload(db, media_store, user, lr)
        media_store.fail_deletes = True
        service = _service(db, media_store)
        doc_id, external_id = doc.id, doc.external_media_id

        result = service.delete_document(doc_id, user.id)

        assert result.success
        assert external_id in media_store.objects
        assert service.get_document(doc_id).error is DocumentErrorKind.NOT_FOUND

    def test_ownership_lookup_failure(self, db, media_store, make_user, make_leave_request):
        user = make_user()
        lr = make_leave_request(user)
        doc_id = self._upload(db, media_store, user, lr).id

        with patch.object(DocumentRepository, "find_ownership", side_effect=_db_error()):
            result = _service(db, media_store).delete_document(doc_id, user.id)

        assert result.error is DocumentErrorKind.LOOKUP_FAILED
        assert media_store.deleted == []

    def test_record_delete_failure_after_remote_delete(self, db, media_store, make_user, make_leave_request):
        user = make_user()
        lr = make_leave_request(user)
        doc = self._upload(db, media_store, user, lr)
        doc_id, external_id = doc.id, doc.external_media_id

        with patch.object(DocumentRepository, "delete", side_effect=_db_error("DELETE")):
            result = _service(db, media_store).delete_document(doc_id, user.id)

        assert result.error is DocumentErrorKind.PERSIST_FAILED
        assert media_store.deleted == [external_id]
        assert _service(db, media_store).get_document(doc_id).success
