"""Tests for resolving the file that backs a feature."""

from pathlib import Path

from prodexa_storage.features import SHOPPING_LIST, FeatureSettings
from prodexa_storage.handles import LocalFileHandle, MemoryDocumentProvider
from prodexa_storage.location import LocationResolver
from prodexa_storage.store import RecordStore


class TestLocationResolver:
    """Tests for LocationResolver.resolve_file."""

    async def test_defaults_to_document_directory(
        self, resolver: LocationResolver, local_csv: Path
    ):
        resolved = await resolver.resolve_file(SHOPPING_LIST)

        assert isinstance(resolved.file, LocalFileHandle)
        assert resolved.file.path == local_csv
        assert resolved.is_external is False

    async def test_configured_local_directory(
        self, resolver: LocationResolver, settings: FeatureSettings, tmp_path: Path
    ):
        await settings.set_storage_path(SHOPPING_LIST, str(tmp_path / "custom"))

        resolved = await resolver.resolve_file(SHOPPING_LIST)

        assert resolved.file.uri == str(tmp_path / "custom" / "shopping_list.csv")
        assert resolved.is_external is False

    async def test_other_features_use_their_own_file(self, resolver: LocationResolver):
        resolved = await resolver.resolve_file("pantry")

        assert resolved.file.name == "pantry.csv"

    async def test_external_directory_matches_existing_file_by_name(
        self,
        resolver: LocationResolver,
        settings: FeatureSettings,
        provider: MemoryDocumentProvider,
    ):
        tree = provider.add_tree("primary:Lists")
        await tree.create_file("notes.txt")
        existing = await tree.create_file("shopping_list.csv")
        await settings.set_storage_path(SHOPPING_LIST, tree.uri)

        resolved = await resolver.resolve_file(SHOPPING_LIST)

        assert resolved.file.uri == existing.uri
        assert resolved.is_external is True

    async def test_external_directory_without_match_builds_child(
        self,
        resolver: LocationResolver,
        settings: FeatureSettings,
        provider: MemoryDocumentProvider,
    ):
        tree = provider.add_tree("primary:Lists")
        await settings.set_storage_path(SHOPPING_LIST, tree.uri)

        resolved = await resolver.resolve_file(SHOPPING_LIST)

        assert resolved.file.name == "shopping_list.csv"
        assert await resolved.file.exists() is False
        assert resolved.is_external is True

    async def test_listing_failure_falls_back_to_child(
        self,
        resolver: LocationResolver,
        settings: FeatureSettings,
        provider: MemoryDocumentProvider,
    ):
        tree = provider.add_tree("primary:Lists")
        await tree.create_file("shopping_list.csv")
        await settings.set_storage_path(SHOPPING_LIST, tree.uri)
        provider.fail_operations.add("list")

        resolved = await resolver.resolve_file(SHOPPING_LIST)

        assert resolved.file.uri == tree.child_file("shopping_list.csv").uri

    def test_default_path(self, resolver: LocationResolver, local_csv: Path):
        assert resolver.default_path(SHOPPING_LIST) == str(local_csv)


class TestExternalDirectoryStore:
    """Writing through a provider tree reuses the existing document."""

    async def test_ensure_file_does_not_duplicate(
        self,
        store: RecordStore,
        settings: FeatureSettings,
        provider: MemoryDocumentProvider,
    ):
        tree = provider.add_tree("primary:Lists")
        await settings.set_storage_path(SHOPPING_LIST, tree.uri)

        await store.ensure_file()
        await store.ensure_file()

        assert provider.file_names_in(tree) == ["shopping_list.csv"]

    async def test_append_writes_into_existing_document(
        self,
        store: RecordStore,
        settings: FeatureSettings,
        provider: MemoryDocumentProvider,
    ):
        from prodexa_storage.codec import CSV_HEADER, ListRecord

        tree = provider.add_tree("primary:Lists")
        existing = await tree.create_file("shopping_list.csv")
        await existing.write_text(CSV_HEADER + "\n1,Milk,2,Market,3.50,Alice\n")
        await settings.set_storage_path(SHOPPING_LIST, tree.uri)

        await store.append(ListRecord("2", "Bread"))

        assert provider.file_names_in(tree) == ["shopping_list.csv"]
        assert provider.content_of(existing.uri).endswith("\n2,Bread,1,,,\n")
