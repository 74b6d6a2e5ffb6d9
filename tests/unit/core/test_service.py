"""Tests for the Service entity and its derived values."""

import pytest

from wocker_pgsql.core.errors import ServiceValidationError
from wocker_pgsql.core.service import (
    Service,
    StorageMode,
    check_service_name,
    owns_volume,
    parse_image_reference,
    resolve_storage,
    resolve_volume,
)


class TestParseImageReference:
    @pytest.mark.parametrize(
        ("reference", "expected"),
        [
            ("postgres:16", ("postgres", "16")),
            ("postgres", ("postgres", None)),
            (
                "localhost:5000/postgres:15-alpine",
                ("localhost:5000/postgres", "15-alpine"),
            ),
            ("localhost:5000/postgres", ("localhost:5000/postgres", None)),
            ("postgres@sha256:abc", ("postgres@sha256:abc", None)),
        ],
    )
    def test_splits_name_and_tag(self, reference, expected):
        assert parse_image_reference(reference) == expected


class TestService:
    def test_derived_names(self):
        service = Service(name="default")

        assert service.container_name == "pgsql-default.ws"
        assert service.default_volume == "wocker-pgsql-default"
        assert service.image == "postgres:latest"
        assert service.storage == "filesystem"
        assert not service.is_external

    def test_empty_name_rejected(self):
        with pytest.raises(ValueError):
            Service(name="")

    @pytest.mark.parametrize(
        "name", ["..", ".", "a/b", "a/../..", "-main", "main db", "main\n"]
    )
    def test_unsafe_names_rejected(self, name):
        with pytest.raises(ValueError, match="Invalid service name"):
            Service(name=name)

    @pytest.mark.parametrize("name", ["main", "db_2", "app.v1", "A-b"])
    def test_container_safe_names_accepted(self, name):
        assert Service(name=name).name == name

    def test_check_service_name(self):
        assert check_service_name("main") == "main"

        with pytest.raises(ServiceValidationError, match="Invalid service name"):
            check_service_name("..")

    def test_image_field_is_split(self):
        service = Service.from_object({"name": "main", "image": "postgres:16"})

        assert service.image_name == "postgres"
        assert service.image_version == "16"

    def test_untagged_image_keeps_reference(self):
        service = Service.from_object({"name": "main", "image": "registry.local/pg"})

        assert service.image == "registry.local/pg"

    def test_camel_case_keys_accepted(self):
        service = Service.from_object(
            {
                "name": "main",
                "imageName": "postgres",
                "imageVersion": "15",
                "containerPort": 5433,
            }
        )

        assert service.image == "postgres:15"
        assert service.container_port == 5433

    def test_to_object_omits_unset_fields(self):
        service = Service(name="main", user="app", password="pw", container_port=5433)

        assert service.to_object() == {
            "name": "main",
            "user": "app",
            "password": "pw",
            "image": "postgres:latest",
            "storage": "filesystem",
            "containerPort": 5433,
        }

    def test_round_trip(self):
        data = {
            "name": "remote",
            "user": "u",
            "password": "p",
            "host": "db.example.com",
            "port": "5433",
            "image": "postgres:16",
            "storage": "volume",
            "volume": "shared",
            "containerPort": 5433,
        }

        assert Service.from_object(data).to_object() == data


class TestAuthArgs:
    def test_local_service_passes_user_only(self):
        assert Service(name="a", user="app").auth_args() == ["-U", "app"]

    def test_external_service_passes_host_and_port(self):
        service = Service(name="a", user="app", host="db", port=5433)

        assert service.auth_args() == ["-U", "app", "--host", "db", "--port", "5433"]

    def test_external_service_without_port(self):
        service = Service(name="a", host="db")

        assert service.is_external
        assert service.auth_args() == ["--host", "db"]


class TestStorage:
    def test_resolve_known_modes(self):
        volume_service = Service(name="a", storage="volume")
        assert resolve_storage(volume_service) is StorageMode.VOLUME
        assert resolve_storage(Service(name="a")) is StorageMode.FILESYSTEM

    def test_unknown_mode_rejected(self):
        with pytest.raises(
            ServiceValidationError, match='Unknown storage type "tmpfs"'
        ):
            resolve_storage(Service(name="a", storage="tmpfs"))

    def test_default_volume_is_owned(self):
        service = Service(name="a", storage="volume")

        assert resolve_volume(service) == "wocker-pgsql-a"
        assert owns_volume(service)

    def test_custom_volume_is_not_owned(self):
        service = Service(name="a", storage="volume", volume="shared-data")

        assert resolve_volume(service) == "shared-data"
        assert not owns_volume(service)
