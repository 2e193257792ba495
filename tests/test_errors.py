"""오류 신고 API 테스트 — 접수, 목록, 상세, 수정, 삭제.

Error report API tests — create (JSON and multipart), list filters and
ordering, detail, partial update, delete, and the auth gate.
"""

import threading
from datetime import datetime, timedelta
from pathlib import Path

from httpx import AsyncClient
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

import pytest

from app.config import Settings
from app.schemas.error_report import ErrorReportInsert, ErrorReportUpdate
from app.services.error_report_service import ErrorReportService
from app.utils.exceptions import StorageError, ValidationError
from tests.conftest import ERRORS_URL, auth_header, make_report, make_token

VALID_REPORT = {
    "title": "승차권 발매기 오류",
    "content": "1번 플랫폼 승차권 발매기가 작동하지 않습니다.",
    "system": "역무지원",
}

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32


def _ts(value: str) -> datetime:
    return datetime.fromisoformat(value)


async def _create(client: AsyncClient, token: str, **overrides) -> dict:
    res = await client.post(ERRORS_URL, json={**VALID_REPORT, **overrides}, headers=auth_header(token))
    assert res.status_code == 201, res.text
    return res.json()


# ===== 접수 (Create) =====

class TestCreateError:
    """오류 신고 접수 테스트."""

    async def test_create_defaults(self, client: AsyncClient, reporter, reporter_token):
        """상태/우선순위 기본값과 createdAt == updatedAt."""
        data = await _create(client, reporter_token)
        assert isinstance(data["id"], int)
        assert data["status"] == "접수됨"
        assert data["priority"] == "보통"
        assert data["reporterId"] == reporter.id
        assert data["attachments"] is None
        assert data["createdAt"] == data["updatedAt"]

    async def test_create_keeps_supplied_fields(self, client: AsyncClient, reporter_token):
        data = await _create(
            client, reporter_token, priority="긴급", status="처리중", browser="Chrome 120", os="Windows 11"
        )
        assert data["priority"] == "긴급"
        assert data["status"] == "처리중"
        assert data["browser"] == "Chrome 120"
        assert data["os"] == "Windows 11"

    async def test_create_ignores_server_fields(self, client: AsyncClient, reporter, reporter_token):
        """클라이언트가 보낸 reporterId/createdAt/id는 무시."""
        data = await _create(
            client, reporter_token, id=999, reporterId="someone-else", createdAt="2000-01-01T00:00:00Z"
        )
        assert data["id"] != 999
        assert data["reporterId"] == reporter.id
        assert not data["createdAt"].startswith("2000")

    async def test_create_missing_fields(self, client: AsyncClient, reporter_token):
        """필수 필드 누락 시 400 + 위반 필드 목록."""
        res = await client.post(ERRORS_URL, json={}, headers=auth_header(reporter_token))
        assert res.status_code == 400
        fields = res.json()["detail"]["fields"]
        assert {"title", "content", "system"} <= set(fields)

    async def test_create_short_content(self, client: AsyncClient, reporter_token):
        res = await client.post(
            ERRORS_URL, json={**VALID_REPORT, "content": "짧은 내용"}, headers=auth_header(reporter_token)
        )
        assert res.status_code == 400
        assert res.json()["detail"]["fields"] == ["content"]

    async def test_create_blank_title(self, client: AsyncClient, reporter_token):
        res = await client.post(
            ERRORS_URL, json={**VALID_REPORT, "title": "   "}, headers=auth_header(reporter_token)
        )
        assert res.status_code == 400
        assert "title" in res.json()["detail"]["fields"]

    async def test_create_invalid_priority(self, client: AsyncClient, reporter_token):
        res = await client.post(
            ERRORS_URL, json={**VALID_REPORT, "priority": "중간"}, headers=auth_header(reporter_token)
        )
        assert res.status_code == 400
        assert res.json()["detail"]["fields"] == ["priority"]

    async def test_create_too_many_attachment_paths(self, client: AsyncClient, reporter_token):
        paths = [f"/uploads/errors/{i}.png" for i in range(6)]
        res = await client.post(
            ERRORS_URL, json={**VALID_REPORT, "attachments": paths}, headers=auth_header(reporter_token)
        )
        assert res.status_code == 400
        assert res.json()["detail"]["fields"] == ["attachments"]

    async def test_create_non_object_body(self, client: AsyncClient, reporter_token):
        res = await client.post(ERRORS_URL, json=["not", "an", "object"], headers=auth_header(reporter_token))
        assert res.status_code == 400

    async def test_create_multipart_with_attachments(self, client: AsyncClient, reporter_token):
        """multipart 접수 — 이미지만 저장되고 /uploads 경로로 조회 가능."""
        res = await client.post(
            ERRORS_URL,
            data=VALID_REPORT,
            files=[
                ("attachments", ("screen.png", PNG_BYTES, "image/png")),
                ("attachments", ("notes.txt", b"plain text", "text/plain")),
            ],
            headers=auth_header(reporter_token),
        )
        assert res.status_code == 201, res.text
        attachments = res.json()["attachments"]
        assert len(attachments) == 1
        assert attachments[0].startswith("/uploads/errors/")
        assert attachments[0].endswith(".png")

        download = await client.get(attachments[0])
        assert download.status_code == 200
        assert download.content == PNG_BYTES

    async def test_create_multipart_too_many_images(self, client: AsyncClient, reporter_token):
        files = [("attachments", (f"{i}.png", PNG_BYTES, "image/png")) for i in range(6)]
        res = await client.post(ERRORS_URL, data=VALID_REPORT, files=files, headers=auth_header(reporter_token))
        assert res.status_code == 400
        assert res.json()["detail"]["fields"] == ["attachments"]

    async def test_create_multipart_invalid_fields(self, client: AsyncClient, reporter_token):
        res = await client.post(
            ERRORS_URL,
            data={"title": "제목"},
            files=[("attachments", ("a.png", PNG_BYTES, "image/png"))],
            headers=auth_header(reporter_token),
        )
        assert res.status_code == 400
        assert {"content", "system"} <= set(res.json()["detail"]["fields"])

    async def test_create_requires_auth(self, client: AsyncClient):
        res = await client.post(ERRORS_URL, json=VALID_REPORT)
        assert res.status_code == 401

    async def test_create_with_unknown_user_token(self, client: AsyncClient, settings):
        """토큰의 사용자가 없으면 401."""
        res = await client.post(
            ERRORS_URL, json=VALID_REPORT, headers=auth_header(make_token("ghost", settings))
        )
        assert res.status_code == 401

    async def test_service_rejects_unknown_reporter(self, db: AsyncSession):
        data = ErrorReportInsert(**VALID_REPORT, reporter_id="ghost")
        with pytest.raises(ValidationError) as exc_info:
            await ErrorReportService().create_error(db, data)
        assert exc_info.value.fields == ["reporterId"]


# ===== 목록 (List) =====

class TestListErrors:
    """오류 신고 목록 조회 테스트."""

    @pytest.fixture
    async def seeded(self, db: AsyncSession, reporter):
        base = datetime(2026, 10, 1, 9, 0)
        reports = [
            make_report(reporter.id, base, title="Login failure on kiosk", status="접수됨"),
            make_report(reporter.id, base + timedelta(hours=1), title="화장실 조명 고장", system="시설물관리",
                        content="2층 화장실 조명이 깜빡거립니다.", status="완료"),
            make_report(reporter.id, base + timedelta(hours=2), title="비상벨 작동 불량", system="안전관리",
                        content="3번 승강장 비상벨 신호가 LOGIN 서버로 가지 않습니다.", status="처리중"),
        ]
        db.add_all(reports)
        await db.flush()
        return reports

    async def test_list_newest_first(self, client: AsyncClient, reporter_token, seeded):
        res = await client.get(ERRORS_URL, headers=auth_header(reporter_token))
        assert res.status_code == 200
        data = res.json()
        assert data["total"] == 3
        assert [item["id"] for item in data["items"]] == [r.id for r in reversed(seeded)]
        created = [_ts(item["createdAt"]) for item in data["items"]]
        assert created == sorted(created, reverse=True)

    async def test_list_status_filter(self, client: AsyncClient, reporter_token, seeded):
        res = await client.get(ERRORS_URL, params={"status": "완료"}, headers=auth_header(reporter_token))
        data = res.json()
        assert data["total"] == 1
        assert all(item["status"] == "완료" for item in data["items"])

    async def test_list_all_status_sentinel(self, client: AsyncClient, reporter_token, seeded):
        res = await client.get(ERRORS_URL, params={"status": "모든 상태"}, headers=auth_header(reporter_token))
        assert res.json()["total"] == 3

    async def test_list_search_case_insensitive(self, client: AsyncClient, reporter_token, seeded):
        """제목 또는 내용에서 대소문자 무시 검색."""
        res = await client.get(ERRORS_URL, params={"search": "login"}, headers=auth_header(reporter_token))
        titles = {item["title"] for item in res.json()["items"]}
        assert titles == {"Login failure on kiosk", "비상벨 작동 불량"}

    async def test_list_search_korean(self, client: AsyncClient, reporter_token, seeded):
        res = await client.get(ERRORS_URL, params={"search": "조명"}, headers=auth_header(reporter_token))
        assert [item["title"] for item in res.json()["items"]] == ["화장실 조명 고장"]

    async def test_list_search_wildcard_is_literal(self, client: AsyncClient, reporter_token, seeded):
        res = await client.get(ERRORS_URL, params={"search": "%"}, headers=auth_header(reporter_token))
        assert res.json()["total"] == 0

    async def test_list_pagination(self, client: AsyncClient, reporter_token, seeded):
        res = await client.get(ERRORS_URL, params={"page": 2, "limit": 2}, headers=auth_header(reporter_token))
        data = res.json()
        assert data["total"] == 3
        assert data["page"] == 2
        assert data["limit"] == 2
        assert [item["id"] for item in data["items"]] == [seeded[0].id]

    async def test_list_invalid_page(self, client: AsyncClient, reporter_token):
        res = await client.get(ERRORS_URL, params={"page": 0}, headers=auth_header(reporter_token))
        assert res.status_code == 400
        assert res.json()["detail"]["fields"] == ["page"]

    async def test_list_empty(self, client: AsyncClient, reporter_token):
        res = await client.get(ERRORS_URL, headers=auth_header(reporter_token))
        assert res.json() == {"items": [], "total": 0, "page": 1, "limit": 20}

    async def test_list_requires_auth(self, client: AsyncClient):
        res = await client.get(ERRORS_URL)
        assert res.status_code == 401


# ===== 상세 (Detail) =====

class TestGetError:
    """오류 신고 상세 조회 테스트."""

    async def test_round_trip(self, client: AsyncClient, reporter_token):
        created = await _create(client, reporter_token, browser="Safari")
        res = await client.get(f"{ERRORS_URL}/{created['id']}", headers=auth_header(reporter_token))
        assert res.status_code == 200
        assert res.json() == created

    async def test_not_found(self, client: AsyncClient, reporter_token):
        res = await client.get(f"{ERRORS_URL}/424242", headers=auth_header(reporter_token))
        assert res.status_code == 404

    async def test_invalid_token(self, client: AsyncClient):
        """잘못된 토큰은 404가 아니라 401."""
        res = await client.get(f"{ERRORS_URL}/1", headers=auth_header("not-a-jwt"))
        assert res.status_code == 401


# ===== 수정 (Update) =====

class TestUpdateError:
    """오류 신고 부분 수정 테스트."""

    async def test_update_status_and_note(self, client: AsyncClient, reporter_token):
        created = await _create(client, reporter_token)
        res = await client.patch(
            f"{ERRORS_URL}/{created['id']}",
            json={"status": "완료", "processingNote": "발매기 재부팅 후 정상 동작 확인"},
            headers=auth_header(reporter_token),
        )
        assert res.status_code == 200
        data = res.json()
        assert data["status"] == "완료"
        assert data["processingNote"] == "발매기 재부팅 후 정상 동작 확인"
        assert data["title"] == created["title"]
        assert data["createdAt"] == created["createdAt"]
        assert _ts(data["updatedAt"]) > _ts(created["updatedAt"])

    async def test_updated_at_strictly_increases(self, client: AsyncClient, reporter_token):
        created = await _create(client, reporter_token)
        previous = _ts(created["updatedAt"])
        for status in ("처리중", "보류", "처리중"):
            res = await client.patch(
                f"{ERRORS_URL}/{created['id']}", json={"status": status}, headers=auth_header(reporter_token)
            )
            current = _ts(res.json()["updatedAt"])
            assert current > previous
            previous = current

    async def test_empty_patch_refreshes_updated_at(self, client: AsyncClient, reporter_token):
        created = await _create(client, reporter_token)
        res = await client.patch(f"{ERRORS_URL}/{created['id']}", json={}, headers=auth_header(reporter_token))
        assert res.status_code == 200
        assert res.json()["status"] == "접수됨"
        assert _ts(res.json()["updatedAt"]) > _ts(created["updatedAt"])

    async def test_reporter_not_updatable(self, client: AsyncClient, reporter, reporter_token):
        created = await _create(client, reporter_token)
        res = await client.patch(
            f"{ERRORS_URL}/{created['id']}", json={"reporterId": "other"}, headers=auth_header(reporter_token)
        )
        assert res.json()["reporterId"] == reporter.id

    async def test_invalid_status(self, client: AsyncClient, reporter_token):
        created = await _create(client, reporter_token)
        res = await client.patch(
            f"{ERRORS_URL}/{created['id']}", json={"status": "신규"}, headers=auth_header(reporter_token)
        )
        assert res.status_code == 400
        assert res.json()["detail"]["fields"] == ["status"]

    async def test_null_title_rejected(self, client: AsyncClient, reporter_token):
        created = await _create(client, reporter_token)
        res = await client.patch(
            f"{ERRORS_URL}/{created['id']}", json={"title": None}, headers=auth_header(reporter_token)
        )
        assert res.status_code == 400
        assert res.json()["detail"]["fields"] == ["title"]

    async def test_not_found(self, client: AsyncClient, reporter_token):
        res = await client.patch(f"{ERRORS_URL}/424242", json={"status": "완료"}, headers=auth_header(reporter_token))
        assert res.status_code == 404

    async def test_last_writer_wins(self, db: AsyncSession, reporter):
        """동일 신고에 대한 연속 수정은 마지막 값이 남음."""
        service = ErrorReportService()
        report = await service.create_error(db, ErrorReportInsert(**VALID_REPORT, reporter_id=reporter.id))
        await service.update_error(db, report.id, ErrorReportUpdate(status="완료"))
        await service.update_error(db, report.id, ErrorReportUpdate(status="보류"))
        assert (await service.get_error(db, report.id)).status == "보류"

    async def test_service_returns_none_for_missing(self, db: AsyncSession):
        assert await ErrorReportService().update_error(db, 424242, ErrorReportUpdate(status="완료")) is None


# ===== 삭제 (Delete) =====

class TestDeleteError:
    """오류 신고 삭제 테스트."""

    async def test_delete(self, client: AsyncClient, reporter_token):
        created = await _create(client, reporter_token)
        res = await client.delete(f"{ERRORS_URL}/{created['id']}", headers=auth_header(reporter_token))
        assert res.status_code == 200
        assert "message" in res.json()

        res = await client.get(f"{ERRORS_URL}/{created['id']}", headers=auth_header(reporter_token))
        assert res.status_code == 404

    async def test_delete_missing(self, client: AsyncClient, reporter_token):
        res = await client.delete(f"{ERRORS_URL}/424242", headers=auth_header(reporter_token))
        assert res.status_code == 404

    async def test_service_delete_missing_returns_false(self, db: AsyncSession):
        assert await ErrorReportService().delete_error(db, 424242) is False

    async def test_delete_requires_auth(self, client: AsyncClient):
        res = await client.delete(f"{ERRORS_URL}/1")
        assert res.status_code == 401


# ===== 선택 필드 (Optional fields) =====

class TestOptionalTextFields:
    """브라우저/OS 등 선택 필드의 빈 값 처리 테스트."""

    async def test_create_blank_browser(self, client: AsyncClient, reporter_token):
        data = await _create(client, reporter_token, browser="", os="Windows 11")
        assert data["browser"] is None
        assert data["os"] == "Windows 11"

    async def test_create_null_os(self, client: AsyncClient, reporter_token):
        data = await _create(client, reporter_token, os=None)
        assert data["os"] is None

    async def test_create_multipart_blank_fields(self, client: AsyncClient, reporter_token):
        res = await client.post(
            ERRORS_URL,
            data={**VALID_REPORT, "browser": "", "os": ""},
            files=[("attachments", ("notes.txt", b"plain text", "text/plain"))],
            headers=auth_header(reporter_token),
        )
        assert res.status_code == 201, res.text
        assert res.json()["browser"] is None
        assert res.json()["os"] is None

    async def test_update_clears_browser(self, client: AsyncClient, reporter_token):
        created = await _create(client, reporter_token, browser="Chrome")
        res = await client.patch(
            f"{ERRORS_URL}/{created['id']}", json={"browser": None}, headers=auth_header(reporter_token)
        )
        assert res.status_code == 200, res.text
        assert res.json()["browser"] is None


# ===== 첨부파일 저장 (Attachment storage) =====

def _stored_files(settings: Settings) -> list[Path]:
    uploads = Path(settings.LOCAL_UPLOADS_DIR)
    return [p for p in uploads.rglob("*") if p.is_file()] if uploads.exists() else []


class TestAttachmentStorage:
    """첨부파일 저장 경로 테스트 — 크기 제한, 스레드 실행, 실패 시 정리."""

    async def test_oversized_image_rejected(
        self, client: AsyncClient, reporter_token, settings: Settings, monkeypatch
    ):
        monkeypatch.setattr(settings, "MAX_ATTACHMENT_BYTES", len(PNG_BYTES) - 1)
        res = await client.post(
            ERRORS_URL,
            data=VALID_REPORT,
            files=[("attachments", ("big.png", PNG_BYTES, "image/png"))],
            headers=auth_header(reporter_token),
        )
        assert res.status_code == 400
        assert res.json()["detail"]["fields"] == ["attachments"]
        assert _stored_files(settings) == []

    async def test_image_at_limit_accepted(
        self, client: AsyncClient, reporter_token, settings: Settings, monkeypatch
    ):
        monkeypatch.setattr(settings, "MAX_ATTACHMENT_BYTES", len(PNG_BYTES))
        res = await client.post(
            ERRORS_URL,
            data=VALID_REPORT,
            files=[("attachments", ("ok.png", PNG_BYTES, "image/png"))],
            headers=auth_header(reporter_token),
        )
        assert res.status_code == 201, res.text
        assert len(res.json()["attachments"]) == 1

    async def test_save_runs_off_event_loop(self, app, client: AsyncClient, reporter_token, monkeypatch):
        """저장 호출은 이벤트 루프 스레드가 아닌 워커 스레드에서 실행."""
        storage = app.state.storage_service
        original_save = storage.save
        loop_thread = threading.get_ident()
        save_threads: list[int] = []

        def recording_save(*args, **kwargs):
            save_threads.append(threading.get_ident())
            return original_save(*args, **kwargs)

        monkeypatch.setattr(storage, "save", recording_save)
        res = await client.post(
            ERRORS_URL,
            data=VALID_REPORT,
            files=[
                ("attachments", ("a.png", PNG_BYTES, "image/png")),
                ("attachments", ("b.png", PNG_BYTES, "image/png")),
            ],
            headers=auth_header(reporter_token),
        )
        assert res.status_code == 201, res.text
        assert len(save_threads) == 2
        assert loop_thread not in save_threads

    async def test_files_removed_when_insert_fails(
        self, app, client: AsyncClient, reporter_token, settings: Settings, monkeypatch
    ):
        async def failing_create(db, data):
            raise ValidationError(["reporterId"], "reporter does not exist")

        monkeypatch.setattr(app.state.error_report_service, "create_error", failing_create)
        res = await client.post(
            ERRORS_URL,
            data=VALID_REPORT,
            files=[("attachments", ("a.png", PNG_BYTES, "image/png"))],
            headers=auth_header(reporter_token),
        )
        assert res.status_code == 400
        assert _stored_files(settings) == []

    async def test_files_removed_when_later_save_fails(
        self, app, client: AsyncClient, reporter_token, settings: Settings, monkeypatch
    ):
        storage = app.state.storage_service
        original_save = storage.save
        calls: list[str] = []

        def flaky_save(*args, **kwargs):
            calls.append(args[1])
            if len(calls) > 1:
                raise StorageError("Attachment storage unavailable")
            return original_save(*args, **kwargs)

        monkeypatch.setattr(storage, "save", flaky_save)
        res = await client.post(
            ERRORS_URL,
            data=VALID_REPORT,
            files=[
                ("attachments", ("a.png", PNG_BYTES, "image/png")),
                ("attachments", ("b.png", PNG_BYTES, "image/png")),
            ],
            headers=auth_header(reporter_token),
        )
        assert res.status_code == 503
        assert calls == ["a.png", "b.png"]
        assert _stored_files(settings) == []


# ===== 저장소 장애 (Database failures) =====

class TestDatabaseFailures:
    """DB 장애/타임아웃은 내부 정보 없이 503으로 응답."""

    async def test_operational_error_is_503(self, app, client: AsyncClient, reporter_token, monkeypatch):
        async def broken_get_errors(*args, **kwargs):
            raise OperationalError(
                "SELECT error_reports.id FROM error_reports",
                {},
                Exception("could not connect to server at db-host:5432"),
            )

        monkeypatch.setattr(app.state.error_report_service, "get_errors", broken_get_errors)
        res = await client.get(ERRORS_URL, headers=auth_header(reporter_token))
        assert res.status_code == 503
        assert res.json() == {"detail": "Storage unavailable"}
        assert "db-host" not in res.text
        assert "SELECT" not in res.text

    async def test_timeout_is_503(self, app, client: AsyncClient, reporter_token, monkeypatch):
        async def slow_get_detail(*args, **kwargs):
            raise TimeoutError("statement timed out after 30s")

        monkeypatch.setattr(app.state.error_report_service, "get_detail", slow_get_detail)
        res = await client.get(f"{ERRORS_URL}/1", headers=auth_header(reporter_token))
        assert res.status_code == 503
        assert "timed out" not in res.text
