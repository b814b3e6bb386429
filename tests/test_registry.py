"""Tests for the registry facade."""

from __future__ import annotations

import io
import unittest
from pathlib import Path
from tempfile import TemporaryDirectory
from unittest import mock

from bio2rdf_registry import (
    Configuration,
    FetchError,
    MissingSchemeError,
    ParseError,
    Registry,
    UnresolvedNamespaceError,
)
from bio2rdf_registry.api import read_registry
from tests.constants import GO_URI_PREFIX, RDF_URI_PREFIX, get_registry_text, write_registry


class RegistryTestCase(unittest.TestCase):
    """A test case with a registry whose local copy is never updated."""

    def setUp(self) -> None:
        """Set up the test case with a local copy of the registry."""
        self.directory = TemporaryDirectory()
        write_registry(Path(self.directory.name).joinpath("registry.csv"))
        self.registry = Registry(local_registry_directory=self.directory.name, cache_time=0)

    def tearDown(self) -> None:
        """Tear down the temporary directory."""
        self.directory.cleanup()


class TestInitialize(RegistryTestCase):
    """Test initializing the registry."""

    def test_lazy(self) -> None:
        """Test the registry is parsed once on first use."""
        with mock.patch(
            "bio2rdf_registry.registry.read_registry", wraps=read_registry
        ) as mock_read:
            self.assertTrue(self.registry.is_prefix("kegg"))
            self.assertEqual("kegg", self.registry.get_preferred_prefix("ko"))
            self.registry.get_fq_uri("ko:K00001")
            self.assertIs(self.registry, self.registry.initialize())
            self.assertEqual(1, mock_read.call_count)

            self.registry.reset()
            self.registry.initialize()
            self.assertEqual(2, mock_read.call_count)

    def test_no_fetch_when_frozen(self) -> None:
        """Test an existing local copy isn't downloaded again when the cache time is zero."""
        with mock.patch("bio2rdf_registry.sources.requests.get") as mock_get:
            self.registry.initialize()
        mock_get.assert_not_called()

    def test_fetch_when_missing(self) -> None:
        """Test the registry is downloaded when there's no local copy."""
        content = get_registry_text().encode("utf-8")
        with TemporaryDirectory() as d:
            registry = Registry(
                local_registry_directory=d, remote_registry_url="https://example.org/r.csv"
            )
            with mock.patch(
                "bio2rdf_registry.sources.requests.get", return_value=mock.Mock(content=content)
            ) as mock_get:
                self.assertEqual("kegg", registry.get_preferred_prefix("ko"))
            mock_get.assert_called_once_with("https://example.org/r.csv", timeout=60)
            self.assertTrue(Path(d).joinpath("registry.csv").is_file())

    def test_fetch_failure(self) -> None:
        """Test a failed download means the registry can't be used."""
        with TemporaryDirectory() as d:
            registry = Registry(local_registry_directory=d)
            with mock.patch(
                "bio2rdf_registry.sources.requests.get", return_value=mock.Mock(content=b"")
            ):
                with self.assertRaises(FetchError):
                    registry.is_prefix("kegg")
                with self.assertRaises(FetchError):
                    registry.is_prefix("kegg")

    def test_parse_failure(self) -> None:
        """Test an unreadable local copy means the registry can't be used."""
        path = self.registry.get_local_registry_filename()
        path.write_bytes(b"\xff\xfe\x00invalid")
        with self.assertRaises(ParseError):
            self.registry.initialize()

    def test_force_fetch(self) -> None:
        """Test forcing a download."""
        with mock.patch(
            "bio2rdf_registry.sources.requests.get",
            return_value=mock.Mock(content=b"header\nabc,,http://example.org/abc/\n"),
        ):
            self.assertTrue(self.registry.fetch_registry(force=True))
        self.registry.reset()
        self.assertTrue(self.registry.is_prefix("abc"))
        self.assertFalse(self.registry.is_prefix("kegg"))


class TestConfiguration(RegistryTestCase):
    """Test configuring the registry."""

    def test_defaults(self) -> None:
        """Test the default configuration."""
        registry = Registry()
        self.assertEqual(1, registry.get_cache_time())
        self.assertEqual("continue", registry.get_unregistered_ns_action())
        self.assertEqual(
            ["original", "bio2rdf", "identifiers.org"], registry.get_uri_scheme_priority()
        )
        self.assertEqual(
            ["xsd", "rdf", "rdfs", "owl", "void", "dc"], registry.get_default_uri_schemes()
        )
        self.assertEqual(Path("registry.csv"), registry.get_local_registry_filename())
        self.assertTrue(registry.get_remote_registry_url().startswith("https://"))

    def test_setters(self) -> None:
        """Test setting configuration."""
        self.registry.set_remote_registry_url("https://example.org/registry.csv")
        self.assertEqual("https://example.org/registry.csv", self.registry.get_remote_registry_url())
        self.registry.set_local_registry("/tmp/registries")
        self.assertEqual(
            Path("/tmp/registries/registry.csv"), self.registry.get_local_registry_filename()
        )
        self.registry.set_cache_time("7")  # type:ignore[arg-type]
        self.assertEqual(7, self.registry.get_cache_time())
        self.registry.set_unregistered_ns_action("fail")
        self.assertEqual("fail", self.registry.get_unregistered_ns_action())

    def test_invalid(self) -> None:
        """Test invalid settings raise errors."""
        with self.assertRaises(ValueError):
            self.registry.set_remote_registry_url("")
        with self.assertRaises(ValueError):
            self.registry.set_local_registry("")
        with self.assertRaises(ValueError):
            self.registry.set_cache_time(-1)
        with self.assertRaises(ValueError):
            self.registry.set_unregistered_ns_action("explode")  # type:ignore[arg-type]

    def test_default_uri_schemes(self) -> None:
        """Test a string is appended and a list replaces."""
        self.registry.set_default_uri_schemes("skos")
        self.assertEqual(
            ["xsd", "rdf", "rdfs", "owl", "void", "dc", "skos"],
            self.registry.get_default_uri_schemes(),
        )
        self.registry.set_default_uri_schemes(["go"])
        self.assertEqual(["go"], self.registry.get_default_uri_schemes())
        self.assertEqual("http://purl.obolibrary.org/obo/GO_1", self.registry.get_fq_uri("go:1"))

    def test_from_configuration(self) -> None:
        """Test keyword arguments override a given configuration."""
        configuration = Configuration(cache_time=3, unregistered_ns_action="die")
        registry = Registry(configuration, cache_time=5)
        self.assertEqual(5, registry.get_cache_time())
        self.assertEqual("die", registry.get_unregistered_ns_action())
        self.assertEqual(3, configuration.cache_time)


class TestPrefixResolution(RegistryTestCase):
    """Test resolving prefixes."""

    def test_is_prefix(self) -> None:
        """Test checking canonical prefixes."""
        self.assertTrue(self.registry.is_prefix("kegg"))
        self.assertTrue(self.registry.is_prefix("kegg_vocabulary"))
        self.assertTrue(self.registry.is_prefix("kegg_resource"))
        self.assertFalse(self.registry.is_prefix("ko"))
        self.assertFalse(self.registry.is_prefix("KEGG"))
        self.assertEqual({}, self.registry.get_no_match_list())

    def test_canonical(self) -> None:
        """Test canonical prefixes resolve to themselves."""
        for prefix in self.registry.snapshot.entries:
            with self.subTest(prefix=prefix):
                self.assertEqual(prefix, self.registry.get_preferred_prefix(prefix))

    def test_synonyms(self) -> None:
        """Test every synonym resolves to its canonical prefix."""
        for entry in self.registry.snapshot.entries.values():
            for synonym in entry.alternate_prefixes:
                with self.subTest(synonym=synonym):
                    self.assertEqual(entry.prefix, self.registry.get_preferred_prefix(synonym))

    def test_normalized(self) -> None:
        """Test spellings that differ after normalization."""
        for prefix, expected in [
            ("ko", "kegg"),
            ("KO", "kegg"),
            (" Ko ", "kegg"),
            ("KEGG", "kegg"),
            ("kegg.orthology", "kegg"),
            ("KEGG_Orthology", "kegg"),
            ("GI", "ncbigi"),
            ("ncbi.gi", "ncbigi"),
            ("Gene Ontology", "go"),
        ]:
            with self.subTest(prefix=prefix):
                self.assertEqual(expected, self.registry.get_preferred_prefix(prefix))

    def test_alternate_uri_not_prefix(self) -> None:
        """Test alternative URIs aren't resolved as prefixes."""
        self.assertIsNone(
            self.registry.get_preferred_prefix("http://amigo.geneontology.org/amigo/term/GO:")
        )

    def test_no_match(self) -> None:
        """Test unresolved prefixes are counted."""
        with self.assertLogs("bio2rdf_registry.resolver", level="WARNING") as logs:
            self.assertIsNone(self.registry.get_preferred_prefix("zzz"))
        self.assertEqual(1, len(logs.output))
        self.assertIsNone(self.registry.get_preferred_prefix("zzz"))
        self.assertIsNone(self.registry.get_preferred_prefix("ZZZ"))
        self.assertEqual({"zzz": 2, "ZZZ": 1}, self.registry.get_no_match_list())

        self.registry.clear_no_match_list()
        self.assertEqual({}, self.registry.get_no_match_list())

    def test_print_no_match(self) -> None:
        """Test printing unresolved prefixes."""
        self.registry.get_preferred_prefix("zzz")
        self.registry.get_preferred_prefix("zzz")
        file = io.StringIO()
        self.registry.print_no_match_list(file=file)
        self.assertEqual(
            "NOTICE: Unable to find namespace zzz in registry: 2 occurrences\n", file.getvalue()
        )

    def test_strict(self) -> None:
        """Test strict and passthrough lookups."""
        with self.assertRaises(UnresolvedNamespaceError) as e:
            self.registry.get_preferred_prefix("zzz", strict=True)
        self.assertEqual("zzz", e.exception.prefix)
        self.assertEqual("zzz", self.registry.get_preferred_prefix("zzz", passthrough=True))
        self.assertEqual("kegg", self.registry.get_preferred_prefix("ko", strict=True))

    def test_die(self) -> None:
        """Test unresolved prefixes are fatal with the die action."""
        self.registry.set_unregistered_ns_action("die")
        self.assertEqual("kegg", self.registry.get_preferred_prefix("ko"))
        with self.assertRaises(UnresolvedNamespaceError):
            self.registry.get_preferred_prefix("zzz")
        with self.assertRaises(UnresolvedNamespaceError):
            self.registry.map_qname("zzz:123")
        with self.assertRaises(UnresolvedNamespaceError):
            self.registry.get_fq_uri("zzz:123")
        self.assertEqual({"zzz": 3}, self.registry.get_no_match_list())

    def test_continue(self) -> None:
        """Test unresolved prefixes allow further calls with the continue action."""
        self.assertIsNone(self.registry.get_preferred_prefix("zzz"))
        self.assertEqual("kegg", self.registry.get_preferred_prefix("ko"))

    def test_get_entry(self) -> None:
        """Test getting entries."""
        entry = self.registry.get_entry("go")
        self.assertEqual("Gene Ontology", entry.metadata["title"])
        with self.assertRaises(KeyError):
            self.registry.get_entry("ko")
        self.assertIsNone(self.registry.get_entry("ko", strict=False))


class TestQNames(RegistryTestCase):
    """Test mapping qualified names and building URIs."""

    def test_map_qname(self) -> None:
        """Test mapping qualified names to their preferred prefixes."""
        self.assertEqual("kegg:K00001", self.registry.map_qname("ko:K00001"))
        self.assertEqual("kegg:K00001", self.registry.map_qname("KO:K00001"))
        self.assertEqual("ncbigi:12345", self.registry.map_qname("GI:12345"))
        self.assertEqual("go:0008150", self.registry.map_qname("GO_0008150", delimiter="_"))
        self.assertEqual("kegg:", self.registry.map_qname("ko"))

    def test_map_qname_identity(self) -> None:
        """Test unresolved qualified names are returned unchanged."""
        self.assertEqual("zzz:123", self.registry.map_qname("zzz:123"))
        self.assertEqual({"zzz": 1}, self.registry.get_no_match_list())
        self.assertEqual("zzz:123", self.registry.map_qname("zzz:123"))
        self.assertEqual({"zzz": 2}, self.registry.get_no_match_list())

    def test_map_qname_keeps_identifier(self) -> None:
        """Test the identifier is never changed."""
        for prefix in ["ko", "go", "zzz", "rdf", ""]:
            for identifier in ["K00001", "a:b:c", " spaced ", "", "ÄÖÜ"]:
                qname = f"{prefix}:{identifier}"
                with self.subTest(qname=qname):
                    self.assertTrue(self.registry.map_qname(qname).endswith(f":{identifier}"))

    def test_scenario_no_original(self) -> None:
        """Test an alias without a provider URI resolves to a Bio2RDF URI."""
        self.assertEqual("kegg", self.registry.get_preferred_prefix("ko"))
        self.assertEqual("http://bio2rdf.org/kegg:K00001", self.registry.get_fq_uri("ko:K00001"))

    def test_original(self) -> None:
        """Test the provider URI is preferred by default."""
        self.assertEqual(GO_URI_PREFIX + "0008150", self.registry.get_fq_uri("go:0008150"))
        self.assertEqual(
            "http://www.ncbi.nlm.nih.gov/protein/12345", self.registry.get_fq_uri("GI:12345")
        )

    def test_explicit_scheme(self) -> None:
        """Test asking for a scheme."""
        self.assertEqual(
            "http://bio2rdf.org/go:0008150", self.registry.get_fq_uri("go:0008150", "bio2rdf")
        )
        self.assertEqual(
            "http://identifiers.org/K00001",
            self.registry.get_fq_uri("ko:K00001", scheme="identifiers.org"),
        )
        with self.assertRaises(MissingSchemeError):
            self.registry.get_fq_uri("ko:K00001", scheme="original")
        with self.assertRaises(MissingSchemeError):
            self.registry.get_fq_uri("GI:1", scheme="identifiers.org")

    def test_priority(self) -> None:
        """Test the scheme priority is followed in order."""
        self.registry.set_uri_scheme_priority(["identifiers.org", "bio2rdf", "original"])
        self.assertEqual("http://identifiers.org/K00001", self.registry.get_fq_uri("ko:K00001"))
        self.assertEqual("http://bio2rdf.org/ncbigi:1", self.registry.get_fq_uri("GI:1"))

        self.registry.set_uri_scheme_priority(["original"])
        self.assertEqual("http://bio2rdf.org/kegg:K00001", self.registry.get_fq_uri("ko:K00001"))

    def test_default_namespaces(self) -> None:
        """Test core vocabularies always use the provider URI."""
        for priority in [
            ["original", "bio2rdf", "identifiers.org"],
            ["bio2rdf", "original"],
            ["identifiers.org"],
        ]:
            self.registry.set_uri_scheme_priority(priority)
            with self.subTest(priority=priority):
                self.assertEqual(RDF_URI_PREFIX + "type", self.registry.get_fq_uri("rdf:type"))
                self.assertEqual(RDF_URI_PREFIX + "type", self.registry.get_fq_uri("RDF:type"))
                self.assertEqual(
                    "http://www.w3.org/2002/07/owl#Class", self.registry.get_fq_uri("owl:Class")
                )
        self.assertEqual(
            RDF_URI_PREFIX + "type", self.registry.get_fq_uri("rdf:type", scheme="bio2rdf")
        )

    def test_default_namespace_missing_continue(self) -> None:
        """Test a core vocabulary without a provider URI gets no URI by default."""
        with self.assertLogs("bio2rdf_registry.resolver", level="ERROR"):
            self.assertIsNone(self.registry.get_fq_uri("dc:title"))
        self.assertIsNone(self.registry.get_fq_uri("void:Dataset"))

    def test_default_namespace_missing_fail(self) -> None:
        """Test a core vocabulary without a provider URI gets no URI with the fail action."""
        self.registry.set_unregistered_ns_action("fail")
        with self.assertLogs("bio2rdf_registry.resolver", level="ERROR"):
            self.assertIsNone(self.registry.get_fq_uri("dc:title"))

    def test_default_namespace_missing_registered(self) -> None:
        """Test a registered core vocabulary without a provider URI never gets a Bio2RDF URI."""
        self.registry.set_default_uri_schemes("kegg")
        self.assertIsNone(self.registry.get_fq_uri("ko:K00001"))
        self.registry.set_unregistered_ns_action("die")
        with self.assertRaises(MissingSchemeError):
            self.registry.get_fq_uri("ko:K00001")

    def test_synthetic(self) -> None:
        """Test vocabulary and resource namespaces."""
        self.assertEqual(
            "http://bio2rdf.org/go_vocabulary:Term", self.registry.get_fq_uri("go_vocabulary:Term")
        )
        self.assertEqual(
            "http://bio2rdf.org/kegg_resource:x", self.registry.get_fq_uri("kegg_resource:x")
        )

    def test_unregistered_continue(self) -> None:
        """Test unregistered namespaces fall back to a Bio2RDF URI."""
        self.assertEqual("http://bio2rdf.org/zzz:123", self.registry.get_fq_uri("zzz:123"))

    def test_unregistered_fail(self) -> None:
        """Test unregistered namespaces get no URI with the fail action."""
        self.registry.set_unregistered_ns_action("fail")
        with self.assertLogs("bio2rdf_registry.resolver", level="ERROR"):
            self.assertIsNone(self.registry.get_fq_uri("zzz:123"))
        self.assertEqual("zzz:123", self.registry.map_qname("zzz:123"))
        self.assertEqual({"zzz": 2}, self.registry.get_no_match_list())

    def test_bio2rdf_uris(self) -> None:
        """Test Bio2RDF URIs with and without mapping."""
        self.assertEqual("http://bio2rdf.org/ko:K00001", self.registry.get_bio2rdf_uri("ko:K00001"))
        self.assertEqual(
            "http://bio2rdf.org/kegg:K00001", self.registry.get_mapped_bio2rdf_uri("ko:K00001")
        )
        self.assertEqual(
            "http://bio2rdf.org/zzz:1", self.registry.get_mapped_bio2rdf_uri("zzz:1")
        )

    def test_bio2rdf_uri_no_initialize(self) -> None:
        """Test building an unmapped Bio2RDF URI doesn't need the registry."""
        registry = Registry(local_registry_directory="/nonexistent/directory")
        self.assertEqual("http://bio2rdf.org/a:b", registry.get_bio2rdf_uri("a:b"))

    def test_compress(self) -> None:
        """Test compressing URIs with provider and alternative URI prefixes."""
        self.assertEqual("go:0008150", self.registry.compress(GO_URI_PREFIX + "0008150"))
        self.assertEqual(
            "go:0008150",
            self.registry.compress("http://amigo.geneontology.org/amigo/term/GO:0008150"),
        )
        self.assertEqual(
            "ncbigi:12345", self.registry.compress("http://www.ncbi.nlm.nih.gov/protein/12345")
        )
        self.assertIsNone(self.registry.compress("http://example.org/nope"))
