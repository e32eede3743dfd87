"""
Tests de carga, canonicalización y validación de namespaces.
"""
import logging

import pytest

from cfdi_wrapper.domain.exceptions import MalformedCfdiError, MalformedXmlError
from cfdi_wrapper.infrastructure.xml.document_loader import (
    XML_DECLARATION,
    canonicalize,
    load_document,
    load_document_from_file,
)
from cfdi_wrapper.infrastructure.xml.namespace_validator import is_valid


class TestCanonicalize:

    def test_removes_indentation_between_tags(self):
        """Test: se eliminan saltos de línea y espacios entre etiquetas"""
        xml = '<?xml version="1.0" encoding="UTF-8"?>\n<a>\n  <b>uno</b>\r\n  <c/>\n</a>\n'
        assert canonicalize(xml) == f'{XML_DECLARATION}\n<a><b>uno</b><c/></a>'

    def test_keeps_whitespace_inside_text(self):
        """Test: el espacio dentro del texto de una hoja se conserva"""
        xml = '<a>\n  <b>  dos   palabras </b>\n</a>'
        assert canonicalize(xml) == f'{XML_DECLARATION}\n<a><b>  dos   palabras </b></a>'

    def test_adds_declaration_when_missing(self):
        assert canonicalize('<a/>').startswith(f'{XML_DECLARATION}\n<a/>')

    def test_replaces_other_declarations(self):
        """Test: una declaración distinta se sustituye por la de UTF-8"""
        xml = "\ufeff<?xml version='1.0' encoding='ISO-8859-1'?>\n<a/>"
        assert canonicalize(xml) == f'{XML_DECLARATION}\n<a/>'

    def test_keeps_leading_processing_instruction(self):
        """Test: una instrucción como xml-stylesheet no se confunde con la declaración"""
        xml = '<?xml-stylesheet href="a"?><a/>'
        assert canonicalize(xml) == f'{XML_DECLARATION}\n<?xml-stylesheet href="a"?><a/>'

    def test_keeps_processing_instruction_after_declaration(self):
        xml = '<?xml version="1.0"?>\n<?xml-stylesheet href="a"?>\n<a/>'
        assert canonicalize(xml) == f'{XML_DECLARATION}\n<?xml-stylesheet href="a"?><a/>'

    def test_cdata_content_is_not_collapsed(self):
        """Test: el espacio entre '>' y '<' dentro de CDATA se conserva"""
        xml = '<a>\n  <![CDATA[x> <y]]>\n  <b/>\n</a>'
        assert canonicalize(xml) == f'{XML_DECLARATION}\n<a><![CDATA[x> <y]]><b/></a>'

    def test_is_idempotent(self, sample_xml):
        once = canonicalize(sample_xml)
        assert canonicalize(once) == once

    def test_single_line_after_declaration(self, sample_xml):
        canonical = canonicalize(sample_xml)
        assert canonical.count("\n") == 1
        assert "\r" not in canonical


class TestLoadDocument:

    def test_load_sample(self, sample_xml):
        document = load_document(sample_xml)
        assert document.valid is True
        assert document.raw == canonicalize(sample_xml)

    def test_discovers_nested_namespace_declarations(self, sample_xml):
        """Test: tfd se declara en el nodo del timbre y también se descubre"""
        document = load_document(sample_xml)
        assert {"cfdi", "xsi", "implocal", "tfd"} <= document.prefixes
        assert document.namespaces["tfd"] == "http://www.sat.gob.mx/TimbreFiscalDigital"

    def test_malformed_xml(self):
        with pytest.raises(MalformedXmlError):
            load_document("<cfdi:Comprobante")

    def test_empty_content(self):
        with pytest.raises(MalformedXmlError):
            load_document("")

    def test_plain_text_is_not_xml(self):
        with pytest.raises(MalformedXmlError):
            load_document("esto no es un CFDI")

    def test_bytes_use_declared_encoding(self):
        """Test: los bytes se decodifican con la codificación declarada"""
        content = '<?xml version="1.0" encoding="ISO-8859-1"?>\n<r a="Peña"/>'.encode("latin-1")
        document = load_document(content)
        assert document.root.get("a") == "Peña"
        assert document.raw == f'{XML_DECLARATION}\n<r a="Peña"/>'

    def test_utf8_bytes_with_bom(self, sample_xml):
        document = load_document(b"\xef\xbb\xbf" + sample_xml.encode("utf-8"))
        assert document.raw == canonicalize(sample_xml)

    def test_rejects_other_types(self):
        with pytest.raises(TypeError):
            load_document(123)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_document_from_file(tmp_path / "no-existe.xml")

    def test_load_from_file(self, resources):
        document = load_document_from_file(resources / "sample-cfdi.xml")
        assert document.xpath("//cfdi:Concepto")[1].get("importe") == "200.00"


class TestNamespaceValidator:

    def test_valid_document(self, sample_xml):
        assert is_valid(load_document(sample_xml), True) is True

    def test_missing_implocal_returns_false(self, invalid_xml):
        document = load_document(invalid_xml)
        assert document.valid is False
        assert is_valid(document) is False

    def test_missing_implocal_raises(self, invalid_xml):
        with pytest.raises(MalformedCfdiError) as exc_info:
            is_valid(load_document(invalid_xml), throw_exception=True)
        assert exc_info.value.missing == ["implocal"]

    def test_loading_does_not_log_missing_namespaces(self, invalid_xml, caplog):
        """Test: construir el documento no emite el aviso; solo is_valid lo hace"""
        with caplog.at_level(logging.WARNING):
            document = load_document(invalid_xml)
            assert not [r for r in caplog.records if "namespaces requeridos" in r.getMessage()]
            is_valid(document)
        assert len([r for r in caplog.records if "namespaces requeridos" in r.getMessage()]) == 1
