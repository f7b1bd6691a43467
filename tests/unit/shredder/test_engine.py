"""Unit tests for the secure deletion engine."""

import os
import shutil
import threading
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from appsweep.shredder.engine import DEFAULT_BLOCK_SIZE, Shredder
from appsweep.shredder.models import ShredProgress, ShredRequest, ShredStatus


def _write(path: Path, size: int) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(os.urandom(size))
    return path


def _request(path: Path) -> ShredRequest:
    return ShredRequest(path=str(path), size_bytes=path.stat().st_size if path.exists() else 0)


class TestShredderInit:
    """Tests for Shredder construction."""

    def test_default_block_size(self) -> None:
        """The default block is one MiB."""
        assert DEFAULT_BLOCK_SIZE == 1024 * 1024

    @pytest.mark.parametrize("block_size", [0, -1])
    def test_rejects_invalid_block_size(self, block_size: int) -> None:
        """Block size must be positive."""
        with pytest.raises(ValueError, match="Block size"):
            Shredder(block_size=block_size)


class TestShredFile:
    """Tests for shredding single files."""

    def test_file_is_removed(self, tmp_path: Path) -> None:
        """The original path no longer exists afterwards."""
        target = _write(tmp_path / "secret.txt", 1000)

        report = Shredder().shred([_request(target)])

        assert not target.exists()
        assert list(tmp_path.iterdir()) == []
        assert report.succeeded[0].path == str(target)
        assert report.bytes_reclaimed == 1000

    def test_content_is_zero_before_removal(self, tmp_path: Path) -> None:
        """The renamed file is all zeros right before it is unlinked."""
        size = 10 * 4096 + 123
        target = _write(tmp_path / "secret.bin", size)
        seen: dict[str, bytes] = {}

        def capture(path: str) -> None:
            seen[path] = Path(path).read_bytes()
            os.unlink(path)

        with patch.object(Shredder, "_remove_file", side_effect=capture):
            Shredder(block_size=4096).shred([_request(target)])

        assert len(seen) == 1
        final_path, content = next(iter(seen.items()))
        assert content == bytes(size)
        assert os.path.dirname(final_path) == str(tmp_path)
        assert os.path.basename(final_path) != "secret.bin"
        assert len(os.path.basename(final_path)) == 32

    def test_writes_full_and_partial_blocks(self, tmp_path: Path) -> None:
        """A file of 2.5 blocks gets two full blocks and one partial block."""
        target = _write(tmp_path / "f", 10)
        progress: list[ShredProgress] = []
        seen: list[bytes] = []

        def capture(path: str) -> None:
            seen.append(Path(path).read_bytes())
            os.unlink(path)

        with patch.object(Shredder, "_remove_file", side_effect=capture):
            Shredder(block_size=4, on_progress=progress.append).shred([_request(target)])

        assert seen == [bytes(10)]
        # SHREDDING, three blocks, item completion, batch end.
        assert len(progress) == 6

    def test_empty_file(self, tmp_path: Path) -> None:
        """An empty file is removed without writing."""
        target = tmp_path / "empty"
        target.touch()

        report = Shredder().shred([_request(target)])

        assert not target.exists()
        assert len(report.succeeded) == 1

    def test_symlink_target_untouched(self, tmp_path: Path) -> None:
        """Links are removed without overwriting what they point at."""
        data = _write(tmp_path / "data", 64)
        original = data.read_bytes()
        link = tmp_path / "link"
        link.symlink_to(data)

        report = Shredder().shred([ShredRequest(path=str(link))])

        assert not link.exists() and not link.is_symlink()
        assert data.read_bytes() == original
        assert len(report.succeeded) == 1


class TestShredDirectory:
    """Tests for shredding directory trees."""

    def test_overwrites_every_file_before_rmtree(self, tmp_path: Path) -> None:
        """All nested files are zeroed before the tree is removed."""
        tree = tmp_path / "Caches" / "com.example.app"
        _write(tree / "a.db", 100)
        _write(tree / "nested" / "deeper" / "b.log", 5000)
        snapshot: dict[str, bytes] = {}
        real_rmtree = shutil.rmtree

        def capture(path: str, *args: object, **kwargs: object) -> None:
            for root, _dirs, files in os.walk(path):
                for name in files:
                    full = os.path.join(root, name)
                    snapshot[os.path.relpath(full, path)] = Path(full).read_bytes()
            real_rmtree(path)

        with patch("appsweep.shredder.engine.shutil.rmtree", side_effect=capture):
            report = Shredder(block_size=512).shred([ShredRequest(str(tree), size_bytes=5100)])

        assert snapshot == {
            "a.db": bytes(100),
            os.path.join("nested", "deeper", "b.log"): bytes(5000),
        }
        assert not tree.exists()
        assert report.bytes_reclaimed == 5100

    def test_directory_files_keep_their_names(self, tmp_path: Path) -> None:
        """Files inside a directory are not renamed individually."""
        tree = tmp_path / "tree"
        _write(tree / "keep-name.txt", 10)
        obfuscate = MagicMock()

        with patch.object(Shredder, "_obfuscate", obfuscate):
            Shredder().shred([ShredRequest(str(tree))])

        obfuscate.assert_not_called()
        assert not tree.exists()


class TestShredBatch:
    """Tests for batch behaviour and accounting."""

    def test_missing_path_is_success(self, tmp_path: Path) -> None:
        """A path that is already gone counts as shredded."""
        report = Shredder().shred([ShredRequest(str(tmp_path / "gone"), size_bytes=0)])

        assert len(report.succeeded) == 1
        assert report.failed == []

    def test_shredding_twice_is_idempotent(self, tmp_path: Path) -> None:
        """Running the same request again succeeds."""
        target = _write(tmp_path / "once", 10)
        request = _request(target)

        Shredder().shred([request])
        report = Shredder().shred([request])

        assert report.succeeded[0].path == str(target)

    def test_failure_does_not_abort_batch(self, tmp_path: Path) -> None:
        """A failing item is reported and later items still run."""
        first = _write(tmp_path / "first", 10)
        second = _write(tmp_path / "second", 20)
        third = _write(tmp_path / "third", 30)
        real_overwrite = Shredder._overwrite

        def flaky(self: Shredder, path: str) -> None:
            if path == str(second):
                raise PermissionError(13, "Permission denied", path)
            real_overwrite(self, path)

        with patch.object(Shredder, "_overwrite", flaky):
            shredder = Shredder()
            report = shredder.shred([_request(first), _request(second), _request(third)])

        assert [r.success for r in report.results] == [True, False, True]
        assert "Permission denied" in (report.results[1].error or "")
        assert report.bytes_reclaimed == 40
        assert second.exists()
        assert [item.status for item in shredder.items] == [
            ShredStatus.DONE,
            ShredStatus.FAILED,
            ShredStatus.DONE,
        ]

    def test_aggregate_counts_done_items_only(self, tmp_path: Path) -> None:
        """Reclaimed bytes equal the sum of sizes of successful items."""
        ok = _write(tmp_path / "ok", 7)
        requests = [_request(ok), ShredRequest(str(tmp_path / "dir" / "missing"), size_bytes=3)]

        report = Shredder().shred(requests)

        assert report.bytes_reclaimed == sum(r.bytes_reclaimed for r in report.succeeded) == 10

    def test_items_processed_in_order(self, tmp_path: Path) -> None:
        """Items are shredded one at a time in input order."""
        paths = [_write(tmp_path / f"f{i}", 5) for i in range(3)]
        names: list[str] = []

        def on_progress(snapshot: ShredProgress) -> None:
            name = snapshot.current_item_name
            if name and (not names or names[-1] != name):
                names.append(name)

        Shredder(on_progress=on_progress).shred([_request(p) for p in paths])

        assert names == ["f0", "f1", "f2"]

    def test_state_resets_after_batch(self, tmp_path: Path) -> None:
        """After a batch the shredder is idle."""
        target = _write(tmp_path / "x", 5)
        shredder = Shredder()

        shredder.shred([_request(target)])

        assert shredder.is_processing is False
        assert shredder.current_item_name == ""
        assert shredder.bytes_reclaimed == 5
        assert shredder.progress.completed == 1

    def test_is_processing_during_batch(self, tmp_path: Path) -> None:
        """Observers see the processing flag and current item."""
        target = _write(tmp_path / "busy", 5)
        observed: list[tuple[bool, str]] = []
        shredder = Shredder(
            on_progress=lambda _p: observed.append(
                (shredder.is_processing, shredder.current_item_name)
            )
        )

        shredder.shred([_request(target)])

        assert (True, "busy") in observed
        assert observed[-1] == (False, "")


class TestShredGuard:
    """Tests for the defensive guard check."""

    def test_refused_path_untouched(self, tmp_path: Path) -> None:
        """Paths the guard refuses are reported as protected and kept."""
        target = _write(tmp_path / "precious", 16)
        original = target.read_bytes()
        guard = MagicMock()
        guard.is_safe_to_delete.return_value = False

        report = Shredder(guard=guard).shred([_request(target)])

        assert target.read_bytes() == original
        result = report.results[0]
        assert result.success is False
        assert result.protected is True
        assert report.bytes_reclaimed == 0

    def test_guard_consulted_per_item(self, tmp_path: Path) -> None:
        """Every item is checked right before it is destroyed."""
        target = _write(tmp_path / "fine", 16)
        guard = MagicMock()
        guard.is_safe_to_delete.return_value = True

        Shredder(guard=guard).shred([_request(target)])

        guard.is_safe_to_delete.assert_called_once_with(str(target))
        assert not target.exists()

    def test_real_guard_refuses_protected(self, make_guard, fake_home: Path) -> None:
        """A real guard stops shredding inside a protected folder."""
        target = _write(fake_home / "Documents" / "thesis.pdf", 32)

        report = Shredder(guard=make_guard()).shred([_request(target)])

        assert target.exists()
        assert report.results[0].protected is True

    def test_directory_holding_protected_data_untouched(
        self, make_guard, fake_home: Path
    ) -> None:
        """A tree containing a protected folder is refused as a whole."""
        keychain = _write(fake_home / "Library" / "Keychains" / "login.keychain-db", 64)
        cache = _write(fake_home / "Library" / "Caches" / "com.example.app" / "blob", 64)
        original = keychain.read_bytes()

        with patch.object(Shredder, "_overwrite") as overwrite:
            report = Shredder(guard=make_guard()).shred([_request(fake_home / "Library")])

        overwrite.assert_not_called()
        assert keychain.read_bytes() == original
        assert cache.exists()
        assert report.results[0].success is False
        assert report.results[0].protected is True

    def test_home_directory_refused(self, make_guard, fake_home: Path) -> None:
        """Shredding the home directory itself is refused."""
        _write(fake_home / "Documents" / "thesis.pdf", 32)

        report = Shredder(guard=make_guard()).shred([_request(fake_home)])

        assert fake_home.is_dir()
        assert report.results[0].protected is True

    def test_device_node_refused(self, make_guard) -> None:
        """Device nodes are never opened for writing."""
        with patch.object(Shredder, "_overwrite") as overwrite:
            report = Shredder(guard=make_guard()).shred([ShredRequest("/dev/null")])

        overwrite.assert_not_called()
        assert report.results[0].success is False
        assert os.path.exists("/dev/null")


class TestShredSpecialFiles:
    """Tests for paths that are not regular files, directories or links."""

    @pytest.mark.skipif(not hasattr(os, "mkfifo"), reason="needs FIFO support")
    def test_fifo_not_overwritten(self, tmp_path: Path) -> None:
        """A FIFO is refused and left in place."""
        fifo = tmp_path / "pipe"
        os.mkfifo(fifo)

        with patch.object(Shredder, "_overwrite") as overwrite:
            report = Shredder().shred([ShredRequest(str(fifo))])

        overwrite.assert_not_called()
        assert fifo.exists()
        result = report.results[0]
        assert result.success is False
        assert "Not a regular file" in (result.error or "")

    @pytest.mark.skipif(not hasattr(os, "mkfifo"), reason="needs FIFO support")
    def test_fifo_inside_directory_is_unlinked(self, tmp_path: Path) -> None:
        """Special files inside a tree are removed, never written to."""
        tree = tmp_path / "tree"
        _write(tree / "data", 16)
        os.mkfifo(tree / "pipe")
        overwritten: list[str] = []

        with patch.object(Shredder, "_overwrite", side_effect=overwritten.append):
            report = Shredder().shred([_request(tree)])

        assert overwritten == [str(tree / "data")]
        assert not tree.exists()
        assert report.results[0].success is True


class TestShredUnexpectedErrors:
    """Tests for errors that are not filesystem errors."""

    def test_error_fails_item_and_batch_continues(self, tmp_path: Path) -> None:
        """Any error marks the item failed and the next one still runs."""
        good = _write(tmp_path / "good", 8)
        bad = "bad\0name"
        guard = MagicMock()

        def is_safe(path: str) -> bool:
            if "\0" in path:
                raise ValueError("embedded null byte")
            return True

        guard.is_safe_to_delete.side_effect = is_safe
        shredder = Shredder(guard=guard)

        report = shredder.shred([ShredRequest(bad), _request(good)])

        assert [item.status for item in shredder.items] == [ShredStatus.FAILED, ShredStatus.DONE]
        assert report.results[0].success is False
        assert report.results[0].error == "embedded null byte"
        assert report.results[1].success is True
        assert not good.exists()
        assert shredder.is_processing is False

    def test_embedded_nul_without_guard(self, tmp_path: Path) -> None:
        """Errors raised by the filesystem layer itself are contained too."""
        good = _write(tmp_path / "good", 8)
        shredder = Shredder()

        report = shredder.shred([ShredRequest(str(tmp_path / "a\0b")), _request(good)])

        assert shredder.items[0].status == ShredStatus.FAILED
        assert shredder.items[1].status == ShredStatus.DONE
        assert len(report.results) == 2


class TestShredCancel:
    """Tests for cooperative cancellation."""

    def test_cancel_before_start(self, tmp_path: Path) -> None:
        """A pre-set cancel event starts no item."""
        target = _write(tmp_path / "a", 10)
        event = threading.Event()
        event.set()

        shredder = Shredder(cancel_event=event)
        report = shredder.shred([_request(target)])

        assert report.cancelled is True
        assert report.results == []
        assert target.exists()
        assert shredder.items[0].status == ShredStatus.PENDING

    def test_cancel_mid_file_stops_further_blocks_and_items(self, tmp_path: Path) -> None:
        """Cancelling during an item stops after the current block."""
        first = _write(tmp_path / "first", 40)
        second = _write(tmp_path / "second", 40)
        blocks: list[int] = []
        shredder: Shredder

        def on_progress(snapshot: ShredProgress) -> None:
            first_running = shredder.items[0].status == ShredStatus.SHREDDING
            if snapshot.current_item_name == "first" and first_running:
                blocks.append(1)
                if len(blocks) == 3:
                    shredder.cancel()

        shredder = Shredder(block_size=4, on_progress=on_progress)
        report = shredder.shred([_request(first), _request(second)])

        assert report.cancelled is True
        assert [r.error for r in report.results] == ["cancelled"]
        assert first.exists()
        assert second.read_bytes() != bytes(40)
        assert [item.status for item in shredder.items] == [
            ShredStatus.FAILED,
            ShredStatus.PENDING,
        ]
        # One notification for SHREDDING, then two blocks before the cancel.
        assert len(blocks) == 3
        assert first.read_bytes()[:8] == bytes(8)

    def test_reset_clears_cancellation(self, tmp_path: Path) -> None:
        """reset() allows a new batch after a cancelled one."""
        target = _write(tmp_path / "later", 10)
        shredder = Shredder()
        shredder.cancel()
        shredder.reset()

        report = shredder.shred([_request(target)])

        assert report.cancelled is False
        assert not target.exists()


class TestShredQueue:
    """Tests for the session queue."""

    def test_add_measures_and_deduplicates(self, tmp_path: Path) -> None:
        """add() records the size once per path."""
        target = _write(tmp_path / "q", 123)
        shredder = Shredder()

        item = shredder.add(target)
        again = shredder.add(str(target))

        assert item is not None
        assert item.request.size_bytes == 123
        assert again is None
        assert len(shredder.items) == 1

    def test_add_expands_home(self, tmp_path: Path) -> None:
        """~ is expanded when queueing."""
        with patch.dict(os.environ, {"HOME": str(tmp_path)}):
            item = Shredder().add("~/whatever")

        assert item is not None
        assert item.request.path == os.path.join(str(tmp_path), "whatever")

    def test_remove(self, tmp_path: Path) -> None:
        """remove() drops a queued path."""
        shredder = Shredder()
        shredder.add(tmp_path / "a")

        assert shredder.remove(tmp_path / "a") is True
        assert shredder.remove(tmp_path / "a") is False
        assert shredder.items == []

    def test_shred_queued_items(self, tmp_path: Path) -> None:
        """shred() without arguments processes the queue."""
        target = _write(tmp_path / "queued", 9)
        shredder = Shredder()
        shredder.add(target)

        report = shredder.shred()

        assert report.bytes_reclaimed == 9
        assert not target.exists()

    def test_terminal_items_are_not_retried(self, tmp_path: Path) -> None:
        """Items already DONE or FAILED are skipped by later batches."""
        target = _write(tmp_path / "once", 9)
        shredder = Shredder()
        shredder.add(target)
        shredder.shred()

        report = shredder.shred()

        assert report.results == []
        assert shredder.progress.completed == 1
        assert shredder.progress.fraction == 1.0

    def test_reset(self, tmp_path: Path) -> None:
        """reset() empties the queue and counters."""
        shredder = Shredder()
        shredder.add(_write(tmp_path / "r", 3))
        shredder.shred()

        shredder.reset()

        assert shredder.items == []
        assert shredder.bytes_reclaimed == 0
        assert shredder.progress.total == 0
