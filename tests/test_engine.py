"""Tests for the async read/write engine."""
import asyncio
import json
import logging
from pathlib import Path

import pytest
from ifedit import read, write
from ifedit.config.settings import EngineSettings
from ifedit.utils.audit_log import audit_logger
from ifedit.interfaces import (
    InterfaceNotFound,
    InterfacesEngine,
    InterfacesIOError,
    InvalidFieldError,
)

NEW_ADDRESS = "99.88.77.100"
NEW_NETMASK = "255.255.0.0"
NEW_NETWORK = "10.0.11.0"
NEW_GATEWAY = "192.168.12.1"
NEW_POWERSAVE = "0"


class TestRead:
    """Tests for reading interface fields."""

    @pytest.mark.asyncio
    async def test_read_dhcp(self, interfaces_file):
        """A dhcp interface reports only its mode."""
        view = await read(interfaces_file, "eth3")

        assert view == {"mode": "dhcp"}

    @pytest.mark.asyncio
    async def test_read_manual(self, interfaces_file):
        """A manual interface reports its mode and no hook lines."""
        view = await read(interfaces_file, "eth1")

        assert view == {"mode": "manual"}

    @pytest.mark.asyncio
    async def test_read_loopback(self, interfaces_file):
        """Loopback has no address fields."""
        view = await read(interfaces_file, "lo")

        assert view == {"mode": "loopback"}

    @pytest.mark.asyncio
    async def test_read_static(self, interfaces_file):
        """A static interface reports exactly its five options plus mode."""
        view = await read(interfaces_file, "eth0")

        assert view == {
            "mode": "static",
            "address": "10.0.11.100",
            "netmask": "255.255.255.0",
            "network": "10.0.11.0",
            "gateway": "10.0.11.1",
            "powersave": "0",
        }

    @pytest.mark.asyncio
    async def test_read_unknown_interface(self, interfaces_file):
        """An undeclared interface fails with InterfaceNotFound."""
        with pytest.raises(InterfaceNotFound) as exc:
            await read(interfaces_file, "eth9")

        assert exc.value.interface == "eth9"
        assert str(interfaces_file) in str(exc.value)

    @pytest.mark.asyncio
    async def test_read_missing_file(self, tmp_path):
        """A missing file fails with InterfacesIOError."""
        missing = tmp_path / "nope"

        with pytest.raises(InterfacesIOError) as exc:
            await read(missing, "eth0")

        assert exc.value.path == str(missing)
        assert isinstance(exc.value, OSError)
        assert isinstance(exc.value.__cause__, FileNotFoundError)

    @pytest.mark.asyncio
    async def test_read_does_not_modify_file(self, interfaces_file, sample_text):
        """Reading leaves the file as it was."""
        await read(interfaces_file, "eth0")

        assert interfaces_file.read_text() == sample_text

    @pytest.mark.asyncio
    async def test_read_other_family(self, tmp_path):
        """The family argument selects an inet6 stanza."""
        path = tmp_path / "interfaces"
        path.write_text("iface eth0 inet6 auto\n    privext 2\n")
        engine = InterfacesEngine()

        assert await engine.read(path, "eth0", family="inet6") == {
            "mode": "auto",
            "privext": "2",
        }
        with pytest.raises(InterfaceNotFound):
            await engine.read(path, "eth0")


class TestWrite:
    """Tests for writing interface fields."""

    @pytest.mark.asyncio
    async def test_write_returns_written_view(self, interfaces_file):
        """write resolves with the merged fields."""
        written = await write(interfaces_file, "eth0", {
            "gateway": NEW_GATEWAY,
            "netmask": NEW_NETMASK,
            "network": NEW_NETWORK,
            "address": NEW_ADDRESS,
            "powersave": NEW_POWERSAVE,
        })

        assert written == {
            "mode": "static",
            "address": NEW_ADDRESS,
            "netmask": NEW_NETMASK,
            "network": NEW_NETWORK,
            "gateway": NEW_GATEWAY,
            "powersave": NEW_POWERSAVE,
        }

    @pytest.mark.asyncio
    async def test_write_all_fields_to_dhcp(self, interfaces_file):
        """All address fields can be set on a dhcp interface."""
        await write(interfaces_file, "eth3", {
            "address": NEW_ADDRESS,
            "netmask": NEW_NETMASK,
            "network": NEW_NETWORK,
            "gateway": NEW_GATEWAY,
            "powersave": NEW_POWERSAVE,
        })

        view = await read(interfaces_file, "eth3")

        assert view["mode"] == "dhcp"
        assert view["address"] == NEW_ADDRESS
        assert view["netmask"] == NEW_NETMASK
        assert view["network"] == NEW_NETWORK
        assert view["gateway"] == NEW_GATEWAY
        assert view["powersave"] == NEW_POWERSAVE

    @pytest.mark.asyncio
    async def test_write_some_fields_to_dhcp(self, interfaces_file):
        """Fields not written stay absent."""
        await write(interfaces_file, "eth3", {
            "address": NEW_ADDRESS,
            "netmask": NEW_NETMASK,
        })

        view = await read(interfaces_file, "eth3")

        assert view == {
            "mode": "dhcp",
            "address": NEW_ADDRESS,
            "netmask": NEW_NETMASK,
        }
        assert "gateway" not in view

    @pytest.mark.asyncio
    async def test_write_address_to_static(self, interfaces_file):
        """Writing an address leaves the other fields alone."""
        before = await read(interfaces_file, "eth0")

        await write(interfaces_file, "eth0", {"address": NEW_ADDRESS})
        after = await read(interfaces_file, "eth0")

        assert after == {**before, "address": NEW_ADDRESS}

    @pytest.mark.asyncio
    async def test_write_netmask_does_not_recompute_network(self, interfaces_file):
        """network is an independent stored field."""
        before = await read(interfaces_file, "eth0")

        await write(interfaces_file, "eth0", {"netmask": NEW_NETMASK})
        after = await read(interfaces_file, "eth0")

        assert after["netmask"] == NEW_NETMASK
        assert after["network"] == before["network"]
        assert after["address"] == before["address"]
        assert after["gateway"] == before["gateway"]
        assert after["powersave"] == before["powersave"]

    @pytest.mark.asyncio
    async def test_write_gateway_to_static(self, interfaces_file):
        before = await read(interfaces_file, "eth0")

        await write(interfaces_file, "eth0", {"gateway": NEW_GATEWAY})
        after = await read(interfaces_file, "eth0")

        assert after == {**before, "gateway": NEW_GATEWAY}

    @pytest.mark.asyncio
    async def test_write_leaves_rest_of_file(self, interfaces_file, sample_text):
        """Only the target stanza's lines change on disk."""
        await write(interfaces_file, "eth2", {"gateway": "192.168.1.1"})

        text = interfaces_file.read_text()

        assert text == sample_text.replace(
            "    gateway 192.168.1.254\n", "    gateway 192.168.1.1\n"
        )

    @pytest.mark.asyncio
    async def test_write_keeps_hooks(self, interfaces_file):
        """Hook lines survive a write to a manual stanza."""
        await write(interfaces_file, "eth1", {"address": "10.1.1.1"})

        text = interfaces_file.read_text()

        assert "    up ifconfig $IFACE 0.0.0.0 up" in text
        assert "    down ifconfig $IFACE down" in text
        assert await read(interfaces_file, "eth1") == {
            "mode": "manual",
            "address": "10.1.1.1",
        }

    @pytest.mark.asyncio
    async def test_write_mode_is_ignored(self, interfaces_file):
        """A read view can be fed back without changing the mode."""
        view = await read(interfaces_file, "eth3")
        view["mode"] = "static"
        view["address"] = NEW_ADDRESS

        written = await write(interfaces_file, "eth3", view)

        assert written == {"mode": "dhcp", "address": NEW_ADDRESS}

    @pytest.mark.asyncio
    async def test_write_unknown_interface(self, interfaces_file, sample_text):
        """Writing to an undeclared interface fails and keeps the file."""
        with pytest.raises(InterfaceNotFound):
            await write(interfaces_file, "eth9", {"address": NEW_ADDRESS})

        assert interfaces_file.read_text() == sample_text

    @pytest.mark.asyncio
    async def test_write_invalid_field(self, interfaces_file, sample_text):
        """Invalid fields fail before the file is touched."""
        with pytest.raises(InvalidFieldError):
            await write(interfaces_file, "eth0", {"up": "reboot"})

        assert interfaces_file.read_text() == sample_text

    @pytest.mark.asyncio
    async def test_write_missing_file(self, tmp_path):
        with pytest.raises(InterfacesIOError):
            await write(tmp_path / "nope", "eth0", {"address": NEW_ADDRESS})

    @pytest.mark.asyncio
    async def test_write_unwritable_file(self, interfaces_file, monkeypatch):
        """An OSError from the file write surfaces as InterfacesIOError."""
        engine = InterfacesEngine()
        original_open = Path.open

        def read_only_open(self, mode="r", *args, **kwargs):
            if "w" in mode:
                raise PermissionError(13, "Permission denied", str(self))
            return original_open(self, mode, *args, **kwargs)

        monkeypatch.setattr(Path, "open", read_only_open)

        with pytest.raises(InterfacesIOError) as exc:
            await engine.write(interfaces_file, "eth0", {"address": NEW_ADDRESS})

        assert exc.value.operation == "write"
        assert isinstance(exc.value.__cause__, PermissionError)
        assert "Permission denied" in str(exc.value)
        assert (await engine.read(interfaces_file, "eth0"))["address"] == "10.0.11.100"

    @pytest.mark.asyncio
    async def test_write_keeps_unusual_line_breaks_elsewhere(self, interfaces_file, sample_text):
        """Form feeds and U+2028 in other lines are not treated as line ends."""
        header = "# note\u2028more\n# page one\x0cpage two\n"
        interfaces_file.write_text(header + sample_text)

        await write(interfaces_file, "eth1", {"address": "10.0.0.1"})

        assert interfaces_file.read_text() == header + sample_text.replace(
            "iface eth1 inet manual\n",
            "iface eth1 inet manual\n    address 10.0.0.1\n",
        )

    @pytest.mark.asyncio
    async def test_write_keeps_crlf_line_endings(self, interfaces_file, sample_text):
        """A CRLF file is still CRLF after a write, edited stanza included."""
        interfaces_file.write_bytes(sample_text.replace("\n", "\r\n").encode())

        view = await write(interfaces_file, "eth3", {"address": NEW_ADDRESS})

        assert view == {"mode": "dhcp", "address": NEW_ADDRESS}
        expected = sample_text.replace(
            "iface eth3 inet dhcp\n",
            f"iface eth3 inet dhcp\n    address {NEW_ADDRESS}\n",
        )
        assert interfaces_file.read_bytes().decode() == expected.replace("\n", "\r\n")
        assert (await read(interfaces_file, "eth0"))["gateway"] == "10.0.11.1"

    @pytest.mark.asyncio
    async def test_write_rejects_value_with_unicode_line_break(self, interfaces_file, sample_text):
        """A value can't smuggle a hook line in through U+2028."""
        with pytest.raises(InvalidFieldError):
            await write(interfaces_file, "eth0", {"address": "10.0.0.1\u2028    up rm -rf /"})

        assert interfaces_file.read_text() == sample_text

    @pytest.mark.asyncio
    async def test_configured_indent(self, interfaces_file):
        """New option lines use the configured indent."""
        engine = InterfacesEngine(EngineSettings(indent="\t"))

        await engine.write(interfaces_file, "eth3", {"address": NEW_ADDRESS})

        assert f"iface eth3 inet dhcp\n\taddress {NEW_ADDRESS}\n" in interfaces_file.read_text()

    @pytest.mark.asyncio
    async def test_sequential_writes_accumulate(self, interfaces_file):
        """Each call re-reads the file, so successive writes build up."""
        engine = InterfacesEngine()

        await engine.write(interfaces_file, "eth3", {"address": NEW_ADDRESS})
        await engine.write(interfaces_file, "eth3", {"netmask": NEW_NETMASK})

        assert await engine.read(interfaces_file, "eth3") == {
            "mode": "dhcp",
            "address": NEW_ADDRESS,
            "netmask": NEW_NETMASK,
        }

    @pytest.mark.asyncio
    async def test_concurrent_reads(self, interfaces_file):
        """Independent reads can run together."""
        views = await asyncio.gather(
            read(interfaces_file, "eth0"),
            read(interfaces_file, "eth2"),
            read(interfaces_file, "eth3"),
        )

        assert [v["mode"] for v in views] == ["static", "static", "dhcp"]


class TestPreviewAndAudit:
    """Tests for dry-run previews and audit records."""

    @pytest.mark.asyncio
    async def test_preview_does_not_write(self, interfaces_file, sample_text):
        engine = InterfacesEngine()

        summary = await engine.preview(interfaces_file, "eth0", {"gateway": NEW_GATEWAY})

        assert f"gateway 10.0.11.1 -> {NEW_GATEWAY}" in summary
        assert interfaces_file.read_text() == sample_text

    @pytest.mark.asyncio
    async def test_write_emits_audit_record(self, interfaces_file, caplog, monkeypatch):
        """A successful write logs a JSON change record."""
        monkeypatch.setattr(audit_logger, "propagate", True)
        with caplog.at_level(logging.INFO, logger="ifedit.audit"):
            await write(interfaces_file, "eth3", {"address": NEW_ADDRESS})

        records = [r for r in caplog.records if r.name == "ifedit.audit"]
        assert len(records) == 1

        data = json.loads(records[0].getMessage())
        assert data["interface"] == "eth3"
        assert data["operation"] == "write"
        assert data["success"] is True
        assert data["before_state"] == {"mode": "dhcp"}
        assert data["after_state"] == {"mode": "dhcp", "address": NEW_ADDRESS}
        assert data["parameters"]["changes"][0]["change_type"] == "create"

    @pytest.mark.asyncio
    async def test_failed_write_emits_audit_record(self, interfaces_file, caplog, monkeypatch):
        """A write to a missing interface is audited as a failure."""
        monkeypatch.setattr(audit_logger, "propagate", True)
        with caplog.at_level(logging.INFO, logger="ifedit.audit"):
            with pytest.raises(InterfaceNotFound):
                await write(interfaces_file, "eth9", {"address": NEW_ADDRESS})

        records = [r for r in caplog.records if r.name == "ifedit.audit"]
        assert len(records) == 1

        data = json.loads(records[0].getMessage())
        assert data["interface"] == "eth9"
        assert data["success"] is False
        assert "eth9" in data["error"]
        assert data["before_state"] is None
        assert data["parameters"]["fields"] == {"address": NEW_ADDRESS}

    @pytest.mark.asyncio
    async def test_write_to_missing_file_emits_audit_record(self, tmp_path, caplog, monkeypatch):
        """A write that can't load the file is audited as a failure."""
        monkeypatch.setattr(audit_logger, "propagate", True)
        with caplog.at_level(logging.INFO, logger="ifedit.audit"):
            with pytest.raises(InterfacesIOError):
                await write(tmp_path / "missing", "eth0", {"address": NEW_ADDRESS})

        records = [r for r in caplog.records if r.name == "ifedit.audit"]
        assert [json.loads(r.getMessage())["success"] for r in records] == [False]
