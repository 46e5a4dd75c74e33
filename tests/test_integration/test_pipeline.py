"""Integration tests: files on disk spliced through the full pipeline."""

import io
import pytest
from splice.lib.engine import SpliceEngine
from splice.lib.errors import ReplacementError
from splice.lib.pipeline import bytes_splice, chunks_read, file_splice, text_splice
from splice.lib.resolve import FileResolver


@pytest.fixture
def site(tmp_path):
    (tmp_path / "header.html").write_text("<header>Top</header>")
    (tmp_path / "footer.html").write_text("<footer>Bottom</footer>")
    (tmp_path / "page.html").write_text(
        '<html>\n<!-- include "header.html" -->\n<p>Body</p>\n'
        '<!-- include "footer.html" -->\n</html>\n'
    )
    return tmp_path


@pytest.mark.asyncio
async def test_chunks_read():
    blocks = [block async for block in chunks_read(io.BytesIO(b"abcdefg"), 3)]
    assert blocks == [b"abc", b"def", b"g"]


@pytest.mark.parametrize("chunk_size", [1, 7, 64, 65536])
@pytest.mark.asyncio
async def test_file_splice(site, chunk_size):
    engine = SpliceEngine(FileResolver(site, block_size=5))
    dst = io.BytesIO()
    with open(site / "page.html", "rb") as src:
        stats = await file_splice(src, dst, engine, chunk_size=chunk_size)

    assert dst.getvalue().decode() == (
        "<html>\n<header>Top</header>\n<p>Body</p>\n<footer>Bottom</footer>\n</html>\n"
    )
    assert stats.placeholders == 2
    assert [r.filename for r in engine.includes] == ["header.html", "footer.html"]


@pytest.mark.asyncio
async def test_file_splice_missing_include(site):
    (site / "broken.html").write_text('a <!-- include "nope.html" --> b')
    engine = SpliceEngine(FileResolver(site))
    dst = io.BytesIO()
    with open(site / "broken.html", "rb") as src:
        with pytest.raises(ReplacementError, match="nope.html"):
            await file_splice(src, dst, engine)
    assert dst.getvalue() == b"a "


@pytest.mark.asyncio
async def test_bytes_splice():
    data = b'x<!-- include "k" -->y'
    assert await bytes_splice(data, {"k": b"K"}) == b"xKy"
    assert await bytes_splice([data[:5], data[5:]], {"k": "K"}) == b"xKy"


@pytest.mark.asyncio
async def test_text_splice_with_config():
    result = await text_splice(
        '{{"name"}}', {"name": "world"}, placeholder_start="{{", placeholder_end="}}"
    )
    assert result == "world"
