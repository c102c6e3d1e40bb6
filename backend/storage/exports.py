"""
Export naming and a local writer.

The two documents are always exported as PIC.png and SAF.png; the SAF name does
not depend on the template variant. The writer is only used by dev tooling; the
application itself persists nothing.
"""
from pathlib import Path
from typing import Iterable, List, Union

from domain.models import DocumentFamily, RenderedDocument

EXPORT_FILENAMES = {
    DocumentFamily.PIC: "PIC.png",
    DocumentFamily.SAF: "SAF.png",
}


def export_filename(family: DocumentFamily) -> str:
    return EXPORT_FILENAMES[family]


class ExportWriter:
    """
    Writes rendered documents into a directory.

    Files are laid out flat:
    - {out_dir}/PIC.png
    - {out_dir}/SAF.png
    """

    def __init__(self, out_dir: Union[str, Path]):
        self.out_dir = Path(out_dir)
        self.out_dir.mkdir(parents=True, exist_ok=True)

    def path_for(self, document: RenderedDocument) -> Path:
        return self.out_dir / document.filename

    def write(self, document: RenderedDocument) -> Path:
        path = self.path_for(document)
        path.write_bytes(document.data)
        return path

    def write_all(self, documents: Iterable[RenderedDocument]) -> List[Path]:
        return [self.write(doc) for doc in documents]
