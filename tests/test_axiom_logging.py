"""요청 로깅 미들웨어 유닛 테스트 — 민감 정보 마스킹."""

from httpx import AsyncClient

from app.middleware.axiom_logging import mask_sensitive


class TestMaskSensitive:

    def test_masks_nested_keys(self):
        masked = mask_sensitive({
            "email": "ana@test.com",
            "password": "secret123",
            "nested": {"refresh_token": "abc", "city": "Lisbon"},
            "items": [{"accessToken": "xyz"}],
        })
        assert masked == {
            "email": "ana@test.com",
            "password": "***",
            "nested": {"refresh_token": "***", "city": "Lisbon"},
            "items": [{"accessToken": "***"}],
        }

    def test_long_lists_truncated(self):
        assert len(mask_sensitive(list(range(50)))) == 20

    def test_depth_limited(self):
        deep: dict = {"a": {"b": {"c": {"d": {"e": {"f": {"g": 1}}}}}}}
        assert "..." in str(mask_sensitive(deep))


async def test_health_passes_through(client: AsyncClient):
    res = await client.get("/health")
    assert res.status_code == 200
    assert res.json() == {"status": "ok"}
