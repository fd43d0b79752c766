from __future__ import annotations

import io
import zipfile
from typing import Callable, Iterable, Optional, Union

import pytest

# 1x1 transparent PNG.
PNG_BYTES = bytes.fromhex(
    "89504e470d0a1a0a0000000d4948445200000001000000010806000000"
    "1f15c4890000000d4944415478da63f8cfc0f01f0005000201a2d2c5c3"
    "0000000049454e44ae426082"
)

CONTAINER_XML = """<?xml version="1.0" encoding="UTF-8"?>
<container version="1.0" xmlns="urn:oasis:names:tc:opendocument:xmlns:container">
  <rootfiles>
    <rootfile full-path="{path}" media-type="application/oebps-package+xml"/>
  </rootfiles>
</container>
"""


def container_xml(path: str) -> str:
    return CONTAINER_XML.format(path=path)


def package_xml(
    items: Iterable[tuple[str, Optional[str], str]],
    spine: Iterable[str],
    title: str = "Sample Book",
) -> str:
    manifest_lines = []
    for item_id, href, media_type in items:
        href_attr = f' href="{href}"' if href is not None else ""
        manifest_lines.append(
            f'    <item id="{item_id}"{href_attr} media-type="{media_type}"/>'
        )
    spine_lines = [f'    <itemref idref="{idref}"/>' for idref in spine]
    return (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        '<package xmlns="http://www.idpf.org/2007/opf" version="3.0" unique-identifier="uid">\n'
        '  <metadata xmlns:dc="http://purl.org/dc/elements/1.1/">\n'
        f"    <dc:title>{title}</dc:title>\n"
        "    <dc:creator>Alice</dc:creator>\n"
        "    <dc:creator>Bob</dc:creator>\n"
        "    <dc:language>en</dc:language>\n"
        "  </metadata>\n"
        "  <manifest>\n" + "\n".join(manifest_lines) + "\n  </manifest>\n"
        "  <spine>\n" + "\n".join(spine_lines) + "\n  </spine>\n"
        "</package>\n"
    )


def xhtml(body: str, head: str = "") -> str:
    return (
        '<?xml version="1.0" encoding="utf-8"?>\n'
        '<html xmlns="http://www.w3.org/1999/xhtml">\n'
        f"<head><title>t</title>{head}</head>\n"
        f"<body>{body}</body>\n"
        "</html>\n"
    )


def build_epub(members: dict[str, Union[bytes, str]]) -> bytes:
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as zf:
        zf.writestr("mimetype", "application/epub+zip")
        for name, data in members.items():
            zf.writestr(name, data)
    return buffer.getvalue()


def corrupt_member(data: bytes, name: str) -> bytes:
    """Overwrite the compressed payload of member ``name`` with 0xFF bytes."""
    with zipfile.ZipFile(io.BytesIO(data)) as zf:
        info = zf.getinfo(name)
    offset = info.header_offset
    name_len = int.from_bytes(data[offset + 26 : offset + 28], "little")
    extra_len = int.from_bytes(data[offset + 28 : offset + 30], "little")
    start = offset + 30 + name_len + extra_len
    end = start + info.compress_size
    return data[:start] + b"\xff" * (end - start) + data[end:]


SAMPLE_CSS = "body { margin: 0; }\np { color: red; }\n@media print { p { color: black; } }\n"


def sample_members() -> dict[str, Union[bytes, str]]:
    return {
        "META-INF/container.xml": container_xml("OEBPS/content.opf"),
        "OEBPS/content.opf": package_xml(
            [
                ("css", "Styles/style.css", "text/css"),
                ("ch1", "Text/ch1.xhtml", "application/xhtml+xml"),
                ("ch2", "Text/ch2.xhtml", "application/xhtml+xml"),
                ("pic", "Images/pic.png", "image/png"),
            ],
            ["ch1", "ch2"],
        ),
        "OEBPS/Styles/style.css": SAMPLE_CSS,
        "OEBPS/Text/ch1.xhtml": xhtml(
            '<h1>Chapter One</h1><p>First.</p><img src="../Images/pic.png" alt="pic"/>',
            head=(
                '<link rel="stylesheet" type="text/css" href="../Styles/style.css"/>'
                "<script>alert('one');</script>"
            ),
        ),
        "OEBPS/Text/ch2.xhtml": xhtml("<h1>Chapter Two</h1><p>Second.</p>"),
        "OEBPS/Images/pic.png": PNG_BYTES,
    }


@pytest.fixture
def png_bytes() -> bytes:
    return PNG_BYTES


@pytest.fixture
def epub_builder() -> Callable[[dict[str, Union[bytes, str]]], bytes]:
    return build_epub


@pytest.fixture
def sample_epub() -> bytes:
    return build_epub(sample_members())
