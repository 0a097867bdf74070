import pytest
from unittest.mock import AsyncMock

from zfsrepl.zfs_operations.core.value_objects.dataset_kind import DatasetKind
from zfsrepl.zfs_operations.core.exceptions.zfs_exceptions import (
    CommandExecutionError,
    CommandInvocationError,
)
from zfsrepl.zfs_operations.core.result import Result
from zfsrepl.zfs_operations.services.directory_service import DirectoryService, marker_predicate

from tests.conftest import ok, failed, make_worker, NOT_FOUND_STDERR


ALL_FILESYSTEMS = ("list", "-Ho", "name", "-t", "filesystem")
RECENT_POOL_A = ("list", "-Hro", "name", "-t", "snapshot", "-S", "creation", "pool/a@")


class TestListDatasets:
    """list_datasets: plain listings and wildcard expansion."""

    @pytest.mark.asyncio
    async def test_plain_listing_with_target(self, directory_service, mock_executor, zfs_responses):
        zfs_responses[ALL_FILESYSTEMS + ("pool/a",)] = ok("pool/a\n")

        result = await directory_service.list_datasets("pool/a", DatasetKind.FILESYSTEM)

        assert result.is_success
        assert result.value == ["pool/a"]
        mock_executor.command.assert_called_once_with("list", "-Ho", "name", "-t", "filesystem", "pool/a")

    @pytest.mark.asyncio
    async def test_recursive_listing(self, directory_service, mock_executor, zfs_responses):
        zfs_responses[("list", "-Ho", "name", "-t", "snapshot", "-r", "pool")] = ok("pool@s1\npool/a@s1\n")

        result = await directory_service.list_datasets("pool", DatasetKind.SNAPSHOT, recursive=True)

        assert result.value == ["pool@s1", "pool/a@s1"]

    @pytest.mark.asyncio
    async def test_empty_pattern_omits_target_argument(self, directory_service, mock_executor, zfs_responses):
        zfs_responses[ALL_FILESYSTEMS] = ok("pool\npool/a\n")

        result = await directory_service.list_datasets("", "filesystem")

        assert result.value == ["pool", "pool/a"]
        args = mock_executor.command.call_args.args
        assert args == ALL_FILESYSTEMS
        assert "" not in args

    @pytest.mark.asyncio
    async def test_only_one_trailing_empty_line_is_removed(self, directory_service, zfs_responses):
        zfs_responses[ALL_FILESYSTEMS] = ok("pool\n\npool/a\n\n")

        result = await directory_service.list_datasets()

        assert result.value == ["pool", "", "pool/a", ""]

    @pytest.mark.asyncio
    async def test_no_output_is_empty_list(self, directory_service, zfs_responses):
        zfs_responses[ALL_FILESYSTEMS] = ok("")

        result = await directory_service.list_datasets()

        assert result.value == []

    @pytest.mark.asyncio
    async def test_wildcard_filters_full_listing_by_substring(self, directory_service, mock_executor, zfs_responses):
        zfs_responses[ALL_FILESYSTEMS] = ok("pool\npool/blah\npool/blah2\nother/pool/blahx\npool/x\n")

        result = await directory_service.list_datasets("pool/blah*", DatasetKind.SNAPSHOT, recursive=True)

        assert result.value == ["pool/blah", "pool/blah2", "other/pool/blahx"]
        # the kind and recursion of the wildcard request are ignored
        mock_executor.command.assert_called_once_with(*ALL_FILESYSTEMS)

    @pytest.mark.asyncio
    async def test_wildcard_is_substring_not_glob(self, directory_service, zfs_responses):
        zfs_responses[ALL_FILESYSTEMS] = ok("pool/a.b\npool/axb\n")

        result = await directory_service.list_datasets("a.b*")

        assert result.value == ["pool/a.b"]

    @pytest.mark.asyncio
    async def test_wildcard_listing_failure_propagates(self, directory_service, zfs_responses):
        zfs_responses[ALL_FILESYSTEMS] = failed("permission denied")

        result = await directory_service.list_datasets("pool*")

        assert result.is_failure
        assert isinstance(result.error, CommandExecutionError)

    @pytest.mark.asyncio
    async def test_invocation_error_is_returned(self, directory_service, mock_executor):
        error = CommandInvocationError(["zfs", "list"], "executable not found")
        mock_executor.command.side_effect = lambda *args: make_worker(invocation_error=error)

        result = await directory_service.list_datasets("pool")

        assert result.error is error


class TestListSnapshotsOfDataset:

    @pytest.mark.asyncio
    async def test_lists_one_level(self, directory_service, mock_executor, zfs_responses):
        zfs_responses[("list", "-Ho", "name", "-d1", "-t", "snapshot", "pool/a")] = ok("pool/a@s1\npool/a@s2\n")

        result = await directory_service.list_snapshots_of_dataset("pool/a")

        assert result.value == ["pool/a@s1", "pool/a@s2"]


class TestExists:

    @pytest.mark.asyncio
    async def test_existing_filesystem(self, directory_service, zfs_responses):
        zfs_responses[ALL_FILESYSTEMS + ("pool/a",)] = ok("pool/a\n")

        result = await directory_service.exists("pool/a", DatasetKind.FILESYSTEM)

        assert result.is_success
        assert result.value is True

    @pytest.mark.asyncio
    async def test_not_found_text_yields_false(self, directory_service, zfs_responses):
        zfs_responses[ALL_FILESYSTEMS + ("pool/missing",)] = failed(NOT_FOUND_STDERR)

        result = await directory_service.exists("pool/missing")

        assert result.is_success
        assert result.value is False

    @pytest.mark.asyncio
    async def test_other_failure_propagates_unchanged(self, directory_service, zfs_responses):
        zfs_responses[ALL_FILESYSTEMS + ("pool/a",)] = failed("permission denied", returncode=2)

        result = await directory_service.exists("pool/a")

        assert result.is_failure
        assert isinstance(result.error, CommandExecutionError)
        assert result.error.exit_code == 2
        assert result.error.stderr == "permission denied"

    @pytest.mark.asyncio
    async def test_snapshot_exists_lists_snapshot_kind(self, directory_service, mock_executor, zfs_responses):
        zfs_responses[("list", "-Ho", "name", "-t", "snapshot", "pool/a@s1")] = ok("pool/a@s1\n")

        result = await directory_service.snapshot_exists("pool/a", "s1")

        assert result.value is True

    @pytest.mark.asyncio
    async def test_custom_not_found_predicate(self, mock_executor, mock_logger, property_service, zfs_responses):
        directory = DirectoryService(
            mock_executor, mock_logger, property_service,
            is_not_found=marker_predicate("n'existe pas")
        )
        zfs_responses[ALL_FILESYSTEMS + ("pool/x",)] = failed("le jeu de données n'existe pas")
        zfs_responses[ALL_FILESYSTEMS + ("pool/y",)] = failed(NOT_FOUND_STDERR)

        assert (await directory.filesystem_exists("pool/x")).value is False
        assert (await directory.filesystem_exists("pool/y")).is_failure


class TestMostRecentSnapshot:

    @pytest.mark.asyncio
    async def test_without_property_returns_first_entry(self, directory_service, mock_executor, zfs_responses):
        zfs_responses[RECENT_POOL_A] = ok("pool/a@s3\npool/a@s1\npool/a@s2\n")

        result = await directory_service.most_recent_snapshot("pool/a@")

        # tool order is trusted, never re-sorted
        assert result.value == "pool/a@s3"
        mock_executor.command.assert_called_once_with(*RECENT_POOL_A)

    @pytest.mark.asyncio
    async def test_empty_pattern_is_omitted(self, directory_service, mock_executor, zfs_responses):
        zfs_responses[RECENT_POOL_A[:-1]] = ok("pool@s1\n")

        result = await directory_service.most_recent_snapshot("")

        assert result.value == "pool@s1"
        mock_executor.command.assert_called_once_with(*RECENT_POOL_A[:-1])

    @pytest.mark.asyncio
    async def test_property_selects_older_snapshot(self, directory_service, zfs_responses):
        zfs_responses[RECENT_POOL_A] = ok("pool/a@s2\npool/a@s1\n")
        zfs_responses[("get", "-Ho", "value", "autobackup", "pool/a@s2")] = ok("-\n")
        zfs_responses[("get", "-Ho", "value", "autobackup", "pool/a@s1")] = ok("true\n")

        result = await directory_service.most_recent_snapshot("pool/a@", "autobackup")

        assert result.value == "pool/a@s1"

    @pytest.mark.asyncio
    async def test_property_must_be_literal_true(self, directory_service, zfs_responses):
        zfs_responses[RECENT_POOL_A] = ok("pool/a@s2\npool/a@s1\n")
        zfs_responses[("get", "-Ho", "value", "autobackup", "pool/a@s2")] = ok("TRUE\n")
        zfs_responses[("get", "-Ho", "value", "autobackup", "pool/a@s1")] = ok("yes\n")

        result = await directory_service.most_recent_snapshot("pool/a@", "autobackup")

        assert result.is_success
        assert result.value == ""

    @pytest.mark.asyncio
    async def test_property_read_failure_skips_candidate(self, directory_service, zfs_responses):
        zfs_responses[RECENT_POOL_A] = ok("pool/a@s3\npool/a@s2\npool/a@s1\n")
        zfs_responses[("get", "-Ho", "value", "autobackup", "pool/a@s3")] = failed("I/O error")
        zfs_responses[("get", "-Ho", "value", "autobackup", "pool/a@s2")] = ok("true\n")

        result = await directory_service.most_recent_snapshot("pool/a@", "autobackup")

        assert result.value == "pool/a@s2"

    @pytest.mark.asyncio
    async def test_listing_failure_propagates(self, directory_service, zfs_responses):
        zfs_responses[RECENT_POOL_A] = failed(NOT_FOUND_STDERR)

        result = await directory_service.most_recent_snapshot("pool/a@", "autobackup")

        assert result.is_failure

    @pytest.mark.asyncio
    async def test_empty_listing_is_no_match(self, directory_service, zfs_responses):
        zfs_responses[RECENT_POOL_A] = ok("")

        result = await directory_service.most_recent_snapshot("pool/a@")

        assert result.is_success
        assert result.value == ""

    @pytest.mark.asyncio
    async def test_uses_injected_property_service(self, mock_executor, mock_logger, zfs_responses):
        properties = AsyncMock()
        properties.get = AsyncMock(side_effect=[
            Result.success("false"),
            Result.success("true"),
        ])
        directory = DirectoryService(mock_executor, mock_logger, properties)
        zfs_responses[RECENT_POOL_A] = ok("pool/a@s2\npool/a@s1\n")

        result = await directory.most_recent_snapshot("pool/a@", "autobackup")

        assert result.value == "pool/a@s1"
        assert properties.get.await_count == 2
