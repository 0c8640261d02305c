"""
Tests for the PDF and DOCX document parsers.
"""

from datetime import datetime, timezone

import pytest

from exhibit.core.errors import RecoverableParseError
from exhibit.core.models import DocxMetadata, FileType, PdfMetadata, RawFile
from exhibit.parsers import docx_parser, pdf_parser
from exhibit.parsers.docx_parser import DocxParser
from exhibit.parsers.pdf_parser import PdfDocumentInfo, PdfParser, script_warnings

from tests.conftest import app_xml, core_xml, corrupt_member

TRUNCATED_PDF = b"%PDF-1.4\n1 0 obj\n<< /Type /Catalog"


def _reader(info):
    return lambda data: info


class TestPdfParser:
    def test_corrupt_pdf_warns_with_empty_tree(self):
        result = PdfParser().parse(RawFile(data=TRUNCATED_PDF, mime_type="application/pdf"))
        assert result.file_type == FileType.PDF
        assert result.metadata == PdfMetadata()
        assert result.warnings
        assert result.warnings[0].startswith("Could not parse PDF:")

    def test_fields_copied_from_reader(self):
        info = PdfDocumentInfo(
            page_count=3,
            title="Quarterly",
            author="Jane Roe",
            producer="LibreOffice 7.5",
            creation_date=datetime(2020, 1, 1, tzinfo=timezone.utc),
            modification_date=datetime(2020, 2, 1, tzinfo=timezone.utc),
            xmp="<x:xmpmeta/>",
        )
        result = PdfParser(document_reader=_reader(info)).parse(RawFile(data=b"%PDF-1.7"))
        assert result.metadata.page_count == 3
        assert result.metadata.author == "Jane Roe"
        assert result.metadata.keywords is None
        assert result.xml_dump == "<x:xmpmeta/>"
        assert result.warnings == ()

    def test_creation_after_modification_warns(self):
        info = PdfDocumentInfo(
            creation_date=datetime(2020, 1, 2),
            modification_date=datetime(2020, 1, 1),
        )
        result = PdfParser(document_reader=_reader(info)).parse(RawFile(data=b"%PDF-1.7"))
        assert result.warnings == (pdf_parser.WARN_TEMPORAL,)

    def test_missing_date_skips_temporal_check(self):
        info = PdfDocumentInfo(creation_date=datetime(2020, 1, 2))
        result = PdfParser(document_reader=_reader(info)).parse(RawFile(data=b"%PDF-1.7"))
        assert result.warnings == ()

    def test_script_heuristics_run_after_parse_failure(self):
        data = TRUNCATED_PDF + b"\n2 0 obj << /S /JavaScript /JS (app.alert(1)) >>"
        result = PdfParser().parse(RawFile(data=data))
        assert result.warnings[0].startswith("Could not parse PDF:")
        assert pdf_parser.WARN_JAVASCRIPT in result.warnings

    def test_reader_error_becomes_warning(self):
        def failing(data):
            raise RecoverableParseError("document is encrypted with a user password")

        result = PdfParser(document_reader=failing).parse(RawFile(data=b"%PDF-1.7"))
        assert result.warnings == (
            pdf_parser.WARN_PARSE.format(error="document is encrypted with a user password"),
        )

    def test_real_document(self, make_pdf):
        data = make_pdf(
            metadata={
                "/Title": "Board minutes",
                "/Author": "J. Roe",
                "/CreationDate": "D:20200102000000",
                "/ModDate": "D:20200101000000",
            }
        )
        result = PdfParser().parse(RawFile(data=data, mime_type="application/pdf"))
        assert result.metadata.page_count == 1
        assert result.metadata.title == "Board minutes"
        assert result.metadata.author == "J. Roe"
        assert pdf_parser.WARN_TEMPORAL in result.warnings

    def test_xmp_error_keeps_info_fields(self):
        info = PdfDocumentInfo(page_count=2, title="Quarterly", xmp_error="stream has no data")
        result = PdfParser(document_reader=_reader(info)).parse(RawFile(data=b"%PDF-1.7"))
        assert result.metadata.title == "Quarterly"
        assert result.metadata.page_count == 2
        assert result.xml_dump is None
        assert result.warnings == (pdf_parser.WARN_XMP.format(error="stream has no data"),)

    def test_broken_xmp_stream_in_real_document(self, make_pdf, monkeypatch):
        def broken(reader):
            raise AttributeError("'NullObject' object has no attribute 'get_data'")

        monkeypatch.setattr(pdf_parser, "_raw_xmp", broken)
        data = make_pdf(metadata={"/Title": "Board minutes", "/Author": "J. Roe"})
        result = PdfParser().parse(RawFile(data=data, mime_type="application/pdf"))
        assert result.metadata.title == "Board minutes"
        assert result.metadata.author == "J. Roe"
        assert result.metadata.page_count == 1
        assert result.warnings[0].startswith("Could not read PDF XMP metadata:")
        assert not any(w.startswith("Could not parse PDF:") for w in result.warnings)

    def test_real_document_with_javascript(self, make_pdf):
        data = make_pdf(javascript="app.alert('hello');")
        result = PdfParser().parse(RawFile(data=data))
        assert pdf_parser.WARN_JAVASCRIPT in result.warnings


class TestScriptHeuristics:
    @pytest.mark.parametrize(
        "data, expected",
        [
            (b"<< /S /JavaScript >>", [pdf_parser.WARN_JAVASCRIPT]),
            (b"<< /JS (x) >>", [pdf_parser.WARN_JAVASCRIPT]),
            (b"<< /OpenAction 3 0 R >>", [pdf_parser.WARN_AUTO_ACTION]),
            (b"<< /AA << /O 4 0 R >> >>", [pdf_parser.WARN_AUTO_ACTION]),
            (
                b"/OpenAction\x00/JavaScript",
                [pdf_parser.WARN_JAVASCRIPT, pdf_parser.WARN_AUTO_ACTION],
            ),
            (b"<< /Type /Page >>", []),
        ],
    )
    def test_markers(self, data, expected):
        assert script_warnings(data) == expected

    def test_markers_below_minimum_run_are_missed(self):
        assert script_warnings(b"\x00/JS\x00") == []
        assert script_warnings(b"\x00/AA\x00") == []


class TestDocxParser:
    def test_core_and_app_properties(self, make_docx):
        result = DocxParser().parse(RawFile(data=make_docx()))
        assert isinstance(result.metadata, DocxMetadata)
        core = result.metadata.core
        assert core.creator == "A"
        assert core.last_modified_by == "B"
        assert core.revision == "3"
        assert core.created == "2020-01-02"
        assert core.title is None
        app = result.metadata.app
        assert app.application == "Microsoft Office Word"
        assert app.pages == "2"
        assert app.company == "Acme"
        assert result.metadata.custom_present is False

    def test_created_after_modified_warns(self, make_docx):
        result = DocxParser().parse(RawFile(data=make_docx()))
        assert result.warnings == (docx_parser.WARN_TEMPORAL,)

    def test_consistent_dates_silent(self, make_docx):
        parts = {
            "docProps/core.xml": core_xml(
                created="2020-01-02T09:00:00Z", modified="2020-01-02T10:00:00Z"
            )
        }
        assert DocxParser().parse(RawFile(data=make_docx(parts))).warnings == ()

    def test_dates_compared_as_instants(self, make_docx):
        parts = {
            "docProps/core.xml": core_xml(
                created="2020-01-02T10:30:00+02:00", modified="2020-01-02T09:00:00Z"
            )
        }
        assert DocxParser().parse(RawFile(data=make_docx(parts))).warnings == ()

    def test_unparseable_dates_silent(self, make_docx):
        parts = {"docProps/core.xml": core_xml(created="yesterday", modified="today")}
        assert DocxParser().parse(RawFile(data=make_docx(parts))).warnings == ()

    def test_xml_dump_labels_parts(self, make_docx):
        result = DocxParser().parse(RawFile(data=make_docx()))
        dump = result.xml_dump
        assert dump.startswith("--- docProps/core.xml ---\n")
        assert "--- docProps/app.xml ---\n" in dump
        assert dump.index("core.xml ---") < dump.index("app.xml ---")
        assert dump.endswith("\n\n")

    def test_not_a_zip(self):
        result = DocxParser().parse(RawFile(data=b"PK\x03\x04 definitely not a zip"))
        assert result.metadata == DocxMetadata()
        assert len(result.warnings) == 1
        assert result.warnings[0].startswith("Could not open DOCX package")
        assert result.xml_dump is None

    def test_malformed_core_keeps_app(self, make_docx):
        parts = {
            "docProps/core.xml": "<cp:coreProperties><unclosed>",
            "docProps/app.xml": app_xml(application="LibreOffice"),
        }
        result = DocxParser().parse(RawFile(data=make_docx(parts)))
        assert result.metadata.core is None
        assert result.metadata.app.application == "LibreOffice"
        assert result.warnings[0].startswith("Could not parse docProps/core.xml:")
        assert "<unclosed>" in result.xml_dump
        assert "--- docProps/app.xml ---" in result.xml_dump

    def test_missing_parts(self, make_docx):
        result = DocxParser().parse(RawFile(data=make_docx({})))
        assert result.metadata == DocxMetadata()
        assert result.warnings == ()
        assert result.xml_dump is None

    def test_custom_part_dumped(self, make_docx):
        parts = {"docProps/custom.xml": "<Properties><property name='case'/></Properties>"}
        result = DocxParser().parse(RawFile(data=make_docx(parts)))
        assert result.metadata.custom_present is True
        assert "--- docProps/custom.xml ---" in result.xml_dump

    def test_oversized_part_skipped(self, make_docx):
        parser = DocxParser(max_part_size=64)
        result = parser.parse(RawFile(data=make_docx()))
        assert result.metadata.core is None
        assert result.metadata.app is None
        assert len(result.warnings) == 2
        assert all(w.startswith("Skipped docProps/") for w in result.warnings)

    def test_corrupt_member_keeps_other_parts(self, make_docx):
        data = corrupt_member(make_docx(), docx_parser.CORE_PART)
        result = DocxParser().parse(RawFile(data=data))
        assert isinstance(result.metadata, DocxMetadata)
        assert result.metadata.core is None
        assert result.metadata.app.application == "Microsoft Office Word"
        assert len(result.warnings) == 1
        assert result.warnings[0].startswith("Could not parse docProps/core.xml:")

    @pytest.mark.parametrize(
        "cut",
        [
            lambda data: data[: len(data) // 2],
            lambda data: data[:40] + data[-200:],
        ],
        ids=["tail-missing", "middle-missing"],
    )
    def test_truncated_archive_warns(self, make_docx, cut):
        result = DocxParser().parse(RawFile(data=cut(make_docx())))
        assert isinstance(result.metadata, DocxMetadata)
        assert result.metadata.core is None
        assert result.warnings
        assert all(w.startswith("Could not") for w in result.warnings)
