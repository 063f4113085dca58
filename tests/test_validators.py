"""Tests for parameter validators."""

import pytest

from utils.validators import (
    validate_alpha,
    validate_backup_backend,
    validate_collection_name,
    validate_fusion_type,
    validate_limit,
    validate_property_definition,
    validate_response_format,
    validate_tenant_status,
    validate_uuid,
    validate_vector,
    validate_weaviate_url,
    validate_where_filter,
)


class TestValidators:
    """Tests for individual validators."""

    @pytest.mark.parametrize("url,ok", [
        ("http://localhost:8080", True),
        ("https://abc.weaviate.network", True),
        ("ftp://host", False),
        ("", False),
    ])
    def test_url(self, url, ok):
        assert validate_weaviate_url(url) is ok

    @pytest.mark.parametrize("name,ok", [("Article", True), ("_Tmp1", True), ("1Article", False), ("a-b", False), ("", False)])
    def test_collection_name(self, name, ok):
        assert validate_collection_name(name) is ok

    def test_property_definition(self):
        assert validate_property_definition({"name": "title", "dataType": ["text"]})
        assert not validate_property_definition({"name": "title", "dataType": "text"})
        assert not validate_property_definition({"name": "bad name", "dataType": ["text"]})
        assert not validate_property_definition({"dataType": ["text"]})

    def test_uuid(self):
        assert validate_uuid("12345678-1234-1234-1234-123456789abc")
        assert validate_uuid("123456781234123412341234567890ab")
        assert not validate_uuid("not-a-uuid")
        assert not validate_uuid("")
        assert not validate_uuid(None)

    def test_vector(self):
        assert validate_vector([0.1, 2])
        assert not validate_vector([])
        assert not validate_vector([True, 0.2])
        assert not validate_vector([0.1, 0.2], expected_dim=3)

    def test_where_filter(self):
        assert validate_where_filter({"operator": "Equal", "path": ["a"], "valueInt": 1})
        assert not validate_where_filter({"operator": "And"})
        assert not validate_where_filter("nope")

    def test_limit(self):
        assert validate_limit(1)
        assert validate_limit("100")
        assert not validate_limit(101)
        assert not validate_limit(0)
        assert not validate_limit("ten")

    def test_alpha(self):
        assert validate_alpha(0)
        assert validate_alpha("0.5")
        assert not validate_alpha(1.5)

    def test_fusion_type(self):
        assert validate_fusion_type("rankedFusion")
        assert validate_fusion_type("relativeScoreFusion")
        assert not validate_fusion_type("ranked")

    def test_tenant_status(self):
        assert validate_tenant_status("hot")
        assert not validate_tenant_status("FROZEN")
        assert validate_tenant_status("FROZEN", for_update=True)
        assert validate_tenant_status("OFFLOADED", for_update=True)

    def test_response_format_and_backend(self):
        assert validate_response_format("markdown")
        assert not validate_response_format("xml")
        assert validate_backup_backend("s3")
        assert not validate_backup_backend("ftp")
