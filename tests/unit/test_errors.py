"""Unit tests for error body normalization."""

import random
import string

import pytest

from netkit.errors import (
    AbsentBody,
    StructuredBody,
    TextBody,
    classify_body,
    normalize_error,
)
from netkit.exceptions import ApiException
from netkit.models import NetworkErrorParams


class TestClassifyBody:
    def test_none_is_absent(self):
        assert isinstance(classify_body(None), AbsentBody)

    def test_string_is_text(self):
        assert classify_body("boom") == TextBody("boom")

    def test_mapping_is_structured(self):
        body = classify_body({"message": "x"})
        assert isinstance(body, StructuredBody)
        assert body.fields["message"] == "x"

    @pytest.mark.parametrize("raw", [[1, 2], 42, 3.5, True])
    def test_unsupported_shapes(self, raw):
        assert classify_body(raw) is None

    def test_variant_passes_through(self):
        body = TextBody("already classified")
        assert classify_body(body) is body


class TestNormalizeError:
    def test_null_body_uses_null_fallback(self, error_params):
        err = normalize_error(None, error_params)
        assert isinstance(err, ApiException)
        assert err.message == error_params.json_null_error
        assert err.status_code == 400
        assert err.messages == ()

    @pytest.mark.parametrize("hint", [None, 401, 404, 500])
    def test_null_body_message_ignores_hint(self, error_params, hint):
        err = normalize_error(None, error_params, hint)
        assert err.message == error_params.json_null_error
        assert err.status_code == (hint if hint is not None else 400)

    def test_string_body(self, error_params):
        err = normalize_error("Service unavailable", error_params, 503)
        assert err.message == "Service unavailable"
        assert err.status_code == 503

    def test_empty_string_body(self):
        params = NetworkErrorParams(json_is_empty_error="Nothing to report")
        err = normalize_error("", params)
        assert err.message == "Nothing to report"
        assert err.status_code == 400

    def test_structured_string_message(self, error_params):
        err = normalize_error({"message": "Not Found"}, error_params, 404)
        assert err.message == "Not Found"
        assert err.status_code == 404
        assert err.messages == ()

    def test_structured_list_message(self, error_params):
        body = {"message": ["name is required", "email is invalid"]}
        err = normalize_error(body, error_params, 422)
        assert err.message == "name is required"
        assert err.messages == ("name is required", "email is invalid")
        assert err.status_code == 422

    def test_structured_empty_list_message(self, error_params):
        err = normalize_error({"message": []}, error_params, 422)
        assert err.message == error_params.could_not_parse_error
        assert err.messages == ()

    def test_status_key_overrides_hint(self, error_params):
        err = normalize_error({"message": "Conflict", "status": 409}, error_params, 400)
        assert err.status_code == 409

    def test_non_numeric_status_key_uses_hint(self, error_params):
        err = normalize_error({"message": "x", "status": "409"}, error_params, 418)
        assert err.status_code == 418

    def test_boolean_status_key_is_not_numeric(self, error_params):
        err = normalize_error({"message": "x", "status": True}, error_params, 403)
        assert err.status_code == 403

    def test_structured_without_hint_defaults_to_400(self, error_params):
        err = normalize_error({"message": "x"}, error_params)
        assert err.status_code == 400

    def test_structured_without_message_key(self, error_params):
        err = normalize_error({"error": "bad"}, error_params, 400)
        assert err.message == error_params.could_not_parse_error

    def test_custom_keys(self):
        params = NetworkErrorParams(message_key="detail", status_code_key="code")
        err = normalize_error({"detail": "Forbidden", "code": 403}, params)
        assert err.message == "Forbidden"
        assert err.status_code == 403

    def test_empty_mapping_is_unparseable(self, error_params):
        err = normalize_error({}, error_params)
        assert err.message == error_params.could_not_parse_error
        assert err.status_code == 417

    def test_list_body_is_unparseable(self, error_params):
        err = normalize_error([{"message": "x"}], error_params, 500)
        assert err.message == error_params.could_not_parse_error
        assert err.status_code == 500

    def test_number_body_without_hint(self, error_params):
        err = normalize_error(12, error_params)
        assert err.status_code == 417

    def test_probe_failure_is_swallowed(self, error_params):
        class Exploding(dict):
            def get(self, *args, **kwargs):
                raise RuntimeError("boom")

        err = normalize_error(Exploding(message="x"), error_params, None)
        assert err.message == error_params.could_not_parse_error
        assert err.status_code == 400

    def test_probe_failure_keeps_hint(self, error_params):
        class Exploding(dict):
            def get(self, *args, **kwargs):
                raise RuntimeError("boom")

        err = normalize_error(Exploding(message="x"), error_params, 502)
        assert err.status_code == 502

    def test_from_json_alias(self, error_params):
        err = ApiException.from_json({"message": "Not Found"}, error_params, 404)
        assert err.message == "Not Found"
        assert err.status_code == 404

    def test_from_json_default_params(self):
        err = ApiException.from_json(None)
        assert err.message == NetworkErrorParams().json_null_error


def _random_word(rng: random.Random) -> str:
    return "".join(rng.choice(string.ascii_letters) for _ in range(rng.randint(1, 12)))


def _random_value(rng: random.Random):
    return rng.choice(
        [
            _random_word(rng),
            rng.randint(-5, 600),
            None,
            [_random_word(rng)],
            {"nested": _random_word(rng)},
        ]
    )


def _random_body(rng: random.Random, message):
    body = {_random_word(rng): _random_value(rng) for _ in range(rng.randint(0, 5))}
    body["message"] = message
    return body


class TestNormalizeErrorProperties:
    """Properties over randomly generated error bodies."""

    SEEDS = range(50)

    @pytest.mark.parametrize("seed", SEEDS)
    def test_string_message_is_primary(self, error_params, seed):
        rng = random.Random(seed)
        message = _random_word(rng)
        err = normalize_error(_random_body(rng, message), error_params, rng.choice([None, 400, 500]))
        assert err.message == message

    @pytest.mark.parametrize("seed", SEEDS)
    def test_list_message_becomes_sub_messages(self, error_params, seed):
        rng = random.Random(seed)
        messages = [_random_word(rng) for _ in range(rng.randint(0, 4))]
        err = normalize_error(_random_body(rng, messages), error_params, 400)
        assert list(err.messages) == messages
        expected = messages[0] if messages else error_params.could_not_parse_error
        assert err.message == expected

    @pytest.mark.parametrize("seed", SEEDS)
    def test_never_raises(self, error_params, seed):
        rng = random.Random(seed)
        raw = rng.choice([None, "", _random_word(rng), {}, [], 7, _random_body(rng, _random_value(rng))])
        err = normalize_error(raw, error_params, rng.choice([None, 401, 503]))
        assert isinstance(err, ApiException)
        assert isinstance(err.status_code, int)
