"""
이미지 업로드 API 엔드포인트 테스트
"""

import io
import uuid

import pytest
from fastapi import status
from fastapi.testclient import TestClient
from PIL import Image as PILImage

from app.constants import EntityType
from app.core.deps import get_current_user_id, get_image_pipeline_config, get_storage
from app.core.security import create_access_token
from app.db.database import get_session
from app.main import app


class TestUploadsAPI:
    """이미지 업로드 API 테스트 클래스"""

    @pytest.fixture
    def client(self):
        """FastAPI 테스트 클라이언트 (lifespan 미실행)"""
        return TestClient(app)

    @pytest.fixture
    def current_user(self):
        """현재 로그인한 사용자 ID (테스트 중 변경 가능)"""
        return {"id": uuid.uuid4()}

    @pytest.fixture(autouse=True)
    def setup_dependencies(self, test_session, storage, pipeline_config, current_user):
        """의존성 오버라이드 설정"""

        def override_session():
            yield test_session

        app.dependency_overrides[get_session] = override_session
        app.dependency_overrides[get_current_user_id] = lambda: current_user["id"]
        app.dependency_overrides[get_storage] = lambda: storage
        app.dependency_overrides[get_image_pipeline_config] = lambda: pipeline_config
        yield
        app.dependency_overrides.clear()

    def _upload(self, client, data: bytes, name="photo.jpg", content_type="image/jpeg", **form):
        return client.post(
            "/api/uploads/image",
            files={"image": (name, data, content_type)},
            data=form,
        )

    def test_upload_single_image(self, client, make_image):
        response = self._upload(client, make_image(2400, 1800), caption="의자")

        assert response.status_code == status.HTTP_201_CREATED
        body = response.json()
        assert body["success"] is True
        image = body["data"]
        assert (image["width"], image["height"]) == (1200, 900)
        assert image["caption"] == "의자"
        assert image["url"] == f"http://testserver/api/uploads/image/{image['filename']}"
        assert image["thumbnail_url"].endswith(f"/api/uploads/thumbnail/{image['filename']}")

    def test_upload_invalid_image(self, client):
        response = self._upload(client, b"not an image")

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        body = response.json()
        assert body["success"] is False
        assert body["error"]["code"] == "INVALID_IMAGE"

    def test_upload_unsupported_type(self, client, make_image):
        response = self._upload(client, make_image(), name="a.gif", content_type="image/gif")

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_upload_disguised_gif_rejected(self, client, make_image):
        """GIF 를 JPEG 로 선언해도 실제 포맷으로 거부"""
        response = self._upload(client, make_image(640, 480, "GIF"), name="cat.jpg")

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["error"]["code"] == "INVALID_IMAGE"
        assert client.get("/api/uploads/my-images").json()["data"] == []

    def test_upload_half_association_rejected(self, client, jpeg_bytes):
        response = self._upload(client, jpeg_bytes, entity_type="listing")

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    def test_batch_upload_partial_failure(self, client, jpeg_bytes, png_bytes):
        response = client.post(
            "/api/uploads/images",
            files=[
                ("images", ("valid.jpg", jpeg_bytes, "image/jpeg")),
                ("images", ("corrupt.jpg", b"broken", "image/jpeg")),
                ("images", ("valid2.png", png_bytes, "image/png")),
            ],
            data={"entity_type": "listing", "entity_id": "4"},
        )

        assert response.status_code == status.HTTP_201_CREATED
        data = response.json()["data"]
        assert data["uploaded"] == 2
        assert data["failed"] == 1
        assert data["errors"][0].startswith("corrupt.jpg: ")
        assert [image["display_order"] for image in data["images"]] == [0, 2]
        assert all(image["entity_type"] == "listing" for image in data["images"])

    def test_batch_upload_without_errors_omits_messages(self, client, jpeg_bytes):
        response = client.post(
            "/api/uploads/images",
            files=[("images", ("a.jpg", jpeg_bytes, "image/jpeg"))],
        )

        data = response.json()["data"]
        assert data["uploaded"] == 1
        assert data["errors"] is None

    def test_batch_upload_limit(self, client, jpeg_bytes):
        response = client.post(
            "/api/uploads/images",
            files=[("images", (f"{i}.jpg", jpeg_bytes, "image/jpeg")) for i in range(11)],
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["error"]["code"] == "UPLOAD_LIMIT_EXCEEDED"

    def test_serve_image_and_thumbnail(self, client, jpeg_bytes):
        filename = self._upload(client, jpeg_bytes).json()["data"]["filename"]

        original = client.get(f"/api/uploads/image/{filename}")
        thumbnail = client.get(f"/api/uploads/thumbnail/{filename}")

        assert original.status_code == status.HTTP_200_OK
        assert original.headers["content-type"] == "image/jpeg"
        assert thumbnail.status_code == status.HTTP_200_OK
        with PILImage.open(io.BytesIO(thumbnail.content)) as thumb:
            assert thumb.size == (200, 200)

    def test_serve_missing_file(self, client):
        response = client.get("/api/uploads/image/missing.jpg")

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json()["error"]["code"] == "IMAGE_FILE_NOT_FOUND"

        body = response.json()
        assert body["success"] is False
        assert body["path"] == "/api/uploads/image/missing.jpg"
        assert "details" not in body["error"]

    def test_metadata_roundtrip(self, client, jpeg_bytes):
        image_id = self._upload(client, jpeg_bytes, alt_text="대체").json()["data"]["id"]

        response = client.put(
            f"/api/uploads/image/{image_id}/metadata", json={"caption": "새 캡션"}
        )
        detail = client.get(f"/api/uploads/image/{image_id}/metadata").json()["data"]

        assert response.status_code == status.HTTP_200_OK
        assert detail["caption"] == "새 캡션"
        assert detail["alt_text"] == "대체"
        assert detail["dimensions"] == "640x480"
        assert detail["artifacts"]["exists"] is True
        assert detail["artifacts"]["has_thumbnail"] is True
        assert detail["artifacts"]["thumbnail_size"] > 0

    def test_negative_display_order_rejected(self, client, jpeg_bytes):
        image_id = self._upload(client, jpeg_bytes).json()["data"]["id"]

        response = client.put(
            f"/api/uploads/image/{image_id}/metadata", json={"display_order": -1}
        )

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    def test_null_display_order_rejected(self, client, jpeg_bytes):
        """표시 순서를 null 로 보내면 422, 기존 값 유지"""
        image_id = self._upload(client, jpeg_bytes, display_order="4").json()["data"]["id"]

        response = client.put(
            f"/api/uploads/image/{image_id}/metadata", json={"display_order": None}
        )
        detail = client.get(f"/api/uploads/image/{image_id}/metadata").json()["data"]

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"
        assert detail["display_order"] == 4

    def test_other_user_gets_not_found(self, client, current_user, jpeg_bytes):
        """남의 이미지 접근은 존재하지 않는 이미지와 같은 응답"""
        image_id = self._upload(client, jpeg_bytes).json()["data"]["id"]
        current_user["id"] = uuid.uuid4()

        foreign = client.delete(f"/api/uploads/image/{image_id}")
        unknown = client.delete(f"/api/uploads/image/{uuid.uuid4()}")

        assert foreign.status_code == unknown.status_code == status.HTTP_404_NOT_FOUND
        assert foreign.json()["error"] == unknown.json()["error"]

    def test_invalid_image_id(self, client):
        response = client.get("/api/uploads/image/not-a-uuid/metadata")

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_associate_list_and_reorder(self, client, jpeg_bytes):
        first = self._upload(client, jpeg_bytes).json()["data"]["id"]
        second = self._upload(client, jpeg_bytes, display_order="1").json()["data"]["id"]

        for image_id in (first, second):
            response = client.post(
                f"/api/uploads/image/{image_id}/associate",
                json={"entity_type": "business", "entity_id": 11},
            )
            assert response.status_code == status.HTTP_200_OK

        listed = client.get("/api/uploads/entity/business/11").json()["data"]
        assert [image["id"] for image in listed] == [first, second]

        reordered = client.put(
            "/api/uploads/entity/business/11/order",
            json={
                "orders": [
                    {"image_id": first, "display_order": 1},
                    {"image_id": second, "display_order": 0},
                ]
            },
        ).json()["data"]
        assert [image["id"] for image in reordered] == [second, first]

    def test_upload_to_entity(self, client, jpeg_bytes, png_bytes):
        response = client.post(
            "/api/uploads/entity/crafts_listing/6/images",
            files=[
                ("images", ("a.jpg", jpeg_bytes, "image/jpeg")),
                ("images", ("b.png", png_bytes, "image/png")),
            ],
            data={"captions": ["앞면", "뒷면"]},
        )

        assert response.status_code == status.HTTP_201_CREATED
        assert response.json()["data"]["uploaded"] == 2
        listed = client.get("/api/uploads/entity/crafts_listing/6").json()["data"]
        assert [image["caption"] for image in listed] == ["앞면", "뒷면"]
        assert [image["display_order"] for image in listed] == [0, 1]

    def test_dissociate(self, client, jpeg_bytes):
        image_id = self._upload(
            client, jpeg_bytes, entity_type="user", entity_id="2"
        ).json()["data"]["id"]

        response = client.delete(f"/api/uploads/image/{image_id}/associate")

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["data"]["entity_type"] is None
        assert client.get("/api/uploads/entity/user/2").json()["data"] == []

    def test_invalid_entity_type(self, client):
        response = client.get("/api/uploads/entity/warehouse/1")

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    def test_my_images_pagination(self, client, jpeg_bytes):
        for _ in range(3):
            self._upload(client, jpeg_bytes)

        response = client.get("/api/uploads/my-images", params={"page": 1, "page_size": 2})

        body = response.json()
        assert len(body["data"]) == 2
        assert body["pagination"]["total_items"] == 3
        assert body["pagination"]["total_pages"] == 2
        assert body["pagination"]["has_next"] is True

    def test_delete_image(self, client, jpeg_bytes):
        data = self._upload(client, jpeg_bytes).json()["data"]

        response = client.delete(f"/api/uploads/image/{data['id']}")

        assert response.status_code == status.HTTP_200_OK
        assert client.get(f"/api/uploads/image/{data['filename']}").status_code == 404


class TestAuthentication:
    """인증 의존성 테스트"""

    @pytest.fixture
    def client(self, test_session, storage, pipeline_config):
        def override_session():
            yield test_session

        app.dependency_overrides[get_session] = override_session
        app.dependency_overrides[get_storage] = lambda: storage
        app.dependency_overrides[get_image_pipeline_config] = lambda: pipeline_config
        yield TestClient(app)
        app.dependency_overrides.clear()

    def test_missing_token(self, client):
        response = client.get("/api/uploads/my-images")

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_invalid_token(self, client):
        response = client.get(
            "/api/uploads/my-images", headers={"Authorization": "Bearer not-a-jwt"}
        )

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_valid_token(self, client):
        token = create_access_token(uuid.uuid4())

        response = client.get(
            "/api/uploads/my-images", headers={"Authorization": f"Bearer {token}"}
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["data"] == []


class TestAdminCleanupAPI:
    """관리자 정리 API 테스트"""

    @pytest.fixture
    def client(self, test_session, storage, pipeline_config):
        def override_session():
            yield test_session

        app.dependency_overrides[get_session] = override_session
        app.dependency_overrides[get_storage] = lambda: storage
        app.dependency_overrides[get_image_pipeline_config] = lambda: pipeline_config
        yield TestClient(app)
        app.dependency_overrides.clear()

    def test_reclaim_orphans(self, client, image_factory, owner_id):
        image_factory(owner_id, age_days=10, with_files=True)
        image_factory(owner_id, age_days=2)
        image_factory(owner_id, age_days=10, entity_type=EntityType.LISTING, entity_id=1)

        response = client.post("/api/admin/cleanup/orphan-images")

        assert response.status_code == status.HTTP_200_OK
        data = response.json()["data"]
        assert data["candidates"] == 1
        assert data["deleted"] == 1
        assert data["failed"] == 0

    def test_statistics(self, client, image_factory, owner_id):
        image_factory(owner_id, age_days=10)
        image_factory(owner_id, age_days=2)

        response = client.get(
            "/api/admin/cleanup/orphan-images/statistics", params={"older_than_days": 1}
        )

        data = response.json()["data"]
        assert data["total_orphans"] == 2
        assert data["expired_orphans"] == 2
