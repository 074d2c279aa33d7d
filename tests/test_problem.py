"""Tests for the Problem envelope and its per-category constructors."""

import json

from webcore import problem
from webcore.problem import Problem


class TestProblemSerialization:

    def test_empty_error_and_specifics_are_omitted(self):
        p = Problem(type="https://testi.ng/x", title="T", detail="D")
        assert p.model_dump_json() == '{"type":"https://testi.ng/x","title":"T","detail":"D"}'

    def test_specifics_keys_are_sorted(self):
        p = Problem(type="t", title="T", detail="D", specifics={"b": 1, "a": 2})
        assert p.model_dump_json() == '{"type":"t","title":"T","detail":"D","specifics":{"a":2,"b":1}}'

    def test_error_is_kept_when_present(self):
        p = Problem(type="t", title="T", detail="D", error="boom")
        assert json.loads(p.model_dump_json())["error"] == "boom"


class TestProblemConstructors:

    def test_unsupported_media_type(self, config):
        p = problem.unsupported_media_type(config, "image/jpeg", ("image/PNG", "image/gif"))
        assert p.model_dump_json() == (
            '{"type":"https://testi.ng/http/unsupported-media-type",'
            '"title":"Unsupported Media Type",'
            '"detail":"The Content-Type \'image/jpeg\' is not supported by this endpoint.",'
            '"specifics":{"allowedContentTypes":["image/PNG","image/gif"],"providedContentType":"image/jpeg"}}'
        )

    def test_request_entity_too_large_uses_friendly_sizes(self, config):
        p = problem.request_entity_too_large(config, 13, 12)
        assert p.detail == (
            "The provided request entity of length 13.00 B (13 bytes) exceeds "
            "the maximum of 12.00 B (12 bytes) on this endpoint."
        )
        assert p.specifics == {"contentLength": 13, "maximumContentLength": 12}

    def test_deserialization_error_text_only_when_debugging(self, config, production_config):
        err = ValueError("unexpected end of JSON input")
        assert problem.deserialization(config, err).error == "unexpected end of JSON input"
        assert problem.deserialization(production_config, err).error is None

    def test_internal_server_error_without_error(self, config):
        p = problem.internal_server_error(config)
        assert "error" not in json.loads(p.model_dump_json())

    def test_not_found(self, config):
        p = problem.not_found(config, "User", "1234")
        assert p.type == "https://testi.ng/http/not-found"
        assert p.detail == "The User '1234' was not found."

    def test_serialization_failure_body_is_valid_json(self, config, production_config):
        body = json.loads(problem.serialization_failure_body(config, TypeError('bad "quote"')))
        assert body["type"] == "https://testi.ng/http/internal-server-error"
        assert body["detail"] == "Serialization of the response model failed."
        assert body["error"] == 'bad "quote"'

        quiet = json.loads(problem.serialization_failure_body(production_config, TypeError("x")))
        assert "error" not in quiet

    def test_prefix_trailing_slash_is_not_doubled(self):
        from webcore.config import Settings

        p = problem.length_required(Settings(problem_type_prefix="https://testi.ng/"))
        assert p.type == "https://testi.ng/http/length-required"
