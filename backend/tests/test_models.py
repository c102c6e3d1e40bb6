import dataclasses

import pytest
from PIL import Image

from domain.errors import AssetLoadError
from domain.models import (
    DocumentFamily,
    FormSnapshot,
    RenderedDocument,
    RenderTarget,
    SafVariant,
    family_for_step,
)
from storage.exports import EXPORT_FILENAMES, ExportWriter, export_filename


def test_snapshot_is_read_only():
    answers = {0: "a"}
    snap = FormSnapshot(answers=answers)
    answers[1] = "b"
    assert dict(snap.answers) == {0: "a"}
    with pytest.raises(TypeError):
        snap.answers[2] = "c"
    with pytest.raises(dataclasses.FrozenInstanceError):
        snap.partner_name = "x"


@pytest.mark.parametrize("flag, variant", [(True, SafVariant.VICTORY), (False, SafVariant.STANDARD), (None, SafVariant.STANDARD)])
def test_saf_variant_only_true_selects_victory(flag, variant):
    assert FormSnapshot(is_victory_member=flag).saf_variant == variant


def test_answer_for_treats_empty_as_unanswered():
    snap = FormSnapshot(answers={0: "", 1: "Retain my support"})
    assert snap.answer_for(0) is None
    assert snap.answer_for(1) == "Retain my support"
    assert snap.answer_for(2) is None


def test_family_for_step():
    assert [family_for_step(s) for s in range(6)] == [
        None,
        DocumentFamily.PIC,
        DocumentFamily.PIC,
        DocumentFamily.SAF,
        DocumentFamily.SAF,
        None,
    ]


def test_render_target_is_a_pure_copy_of_base():
    base = Image.new("RGBA", (4, 4), (10, 20, 30, 128))
    target = RenderTarget.from_base(base)
    assert target.image.getpixel((1, 1)) == (10, 20, 30, 128)
    target.image.putpixel((1, 1), (0, 0, 0, 255))
    assert base.getpixel((1, 1)) == (10, 20, 30, 128)


def test_render_target_composite_clips_negative_offsets():
    target = RenderTarget.from_base(Image.new("RGB", (10, 10), (255, 255, 255)))
    target.composite(Image.new("RGBA", (4, 4), (255, 0, 0, 255)), -2, -2)
    assert target.image.getpixel((0, 0)) == (255, 0, 0, 255)
    assert target.image.getpixel((1, 1)) == (255, 0, 0, 255)
    assert target.image.getpixel((2, 2)) == (255, 255, 255, 255)


def test_asset_load_error_message():
    err = AssetLoadError("SAF.png", "timed out")
    assert err.asset == "SAF.png"
    assert "SAF.png" in str(err) and "timed out" in str(err)


def test_export_names_do_not_depend_on_variant():
    assert export_filename(DocumentFamily.PIC) == "PIC.png"
    assert export_filename(DocumentFamily.SAF) == "SAF.png"
    assert set(EXPORT_FILENAMES.values()) == {"PIC.png", "SAF.png"}


def test_export_writer_writes_flat_files(tmp_path):
    writer = ExportWriter(tmp_path / "exports")
    paths = writer.write_all([
        RenderedDocument(DocumentFamily.PIC, "PIC.png", b"pic"),
        RenderedDocument(DocumentFamily.SAF, "SAF.png", b"saf"),
    ])
    assert [p.name for p in paths] == ["PIC.png", "SAF.png"]
    assert (tmp_path / "exports" / "SAF.png").read_bytes() == b"saf"
