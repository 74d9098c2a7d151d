"""Shared fixtures for building module zips."""

import io
import warnings
import zipfile

import pytest


def build_zip(members, compress_type=zipfile.ZIP_DEFLATED):
    """Build a zip from (name, content) pairs or (name, content, compress_type) triples."""
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w") as zf:
        with warnings.catch_warnings():
            warnings.simplefilter("ignore", UserWarning)
            for member in members:
                name, content = member[0], member[1]
                ctype = member[2] if len(member) > 2 else compress_type
                if isinstance(content, str):
                    content = content.encode("utf-8")
                info = zipfile.ZipInfo(name, date_time=(2020, 1, 2, 3, 4, 6))
                info.compress_type = ctype
                zf.writestr(info, content)
    return buf.getvalue()


def read_zip(data):
    """Return [(name, content, compress_type)] for every member, in order."""
    with zipfile.ZipFile(io.BytesIO(data)) as zf:
        return [(info.filename, zf.read(info), info.compress_type) for info in zf.infolist()]


@pytest.fixture
def make_zip():
    return build_zip


@pytest.fixture
def unzip():
    return read_zip
