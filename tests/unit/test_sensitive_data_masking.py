import pytest

pytestmark = pytest.mark.unit


class TestSensitiveDataMasking:
    def test_phone_key_masked(self):
        from config.settings import mask_sensitive_data

        event_dict = {"event": "test", "phone": "+15550100001"}
        result = mask_sensitive_data(None, None, event_dict)
        assert result["phone"] == "***MASKED***"

    def test_phone_in_free_text_masked(self):
        from config.settings import mask_sensitive_data

        event_dict = {"event": "test", "detail": "lookup for +15550100001 failed"}
        result = mask_sensitive_data(None, None, event_dict)
        assert "+15550100001" not in result["detail"]
        assert "***MASKED***" in result["detail"]

    def test_email_masked(self):
        from config.settings import mask_sensitive_data

        event_dict = {"event": "test", "detail": "sent to ana@example.com"}
        result = mask_sensitive_data(None, None, event_dict)
        assert "ana@example.com" not in result["detail"]
        assert "***MASKED***" in result["detail"]

    def test_password_masked(self):
        from config.settings import mask_sensitive_data

        event_dict = {"event": "test", "data": "password='s3cret123'"}
        result = mask_sensitive_data(None, None, event_dict)
        assert "s3cret123" not in result["data"]
        assert "***MASKED***" in result["data"]

    def test_token_masked(self):
        from config.settings import mask_sensitive_data

        event_dict = {"event": "test", "header": "token=abc123xyz"}
        result = mask_sensitive_data(None, None, event_dict)
        assert "abc123xyz" not in result["header"]
        assert "***MASKED***" in result["header"]

    def test_empty_sensitive_key_left_alone(self):
        from config.settings import mask_sensitive_data

        event_dict = {"event": "test", "email": ""}
        result = mask_sensitive_data(None, None, event_dict)
        assert result["email"] == ""

    def test_non_sensitive_data_unchanged(self):
        from config.settings import mask_sensitive_data

        event_dict = {
            "event": "order.placed",
            "order_id": "ORD-1700000000000-0001",
            "quantity": 3,
        }
        result = mask_sensitive_data(None, None, event_dict)
        assert result["order_id"] == "ORD-1700000000000-0001"
        assert result["event"] == "order.placed"
        assert result["quantity"] == 3
