"""
Tests for the n3check command line.
"""

import logging

import pytest

from n3check.cli import configure_logging, create_parser, main


def run(capsys, *argv):
    code = main(list(argv))
    out, err = capsys.readouterr()
    return code, out, err


class TestArguments:
    def test_defaults(self):
        args = create_parser().parse_args(["proof.n3"])
        assert args.proof == "proof.n3"
        assert not args.strict
        assert not args.no_builtins
        assert args.verbose == 0
        assert args.budget == 100_000

    def test_flags(self):
        args = create_parser().parse_args(["--strict", "--budget", "50", "-vv", "p.n3"])
        assert args.strict
        assert args.budget == 50
        assert args.verbose == 2

    def test_proof_is_required(self):
        with pytest.raises(SystemExit):
            create_parser().parse_args([])

    @pytest.mark.parametrize(
        "verbosity, level",
        [(0, logging.WARNING), (1, logging.INFO), (2, logging.DEBUG), (5, logging.DEBUG)],
    )
    def test_logging_levels(self, monkeypatch, verbosity, level):
        calls = []
        monkeypatch.setattr(logging, "basicConfig", lambda **kw: calls.append(kw))
        configure_logging(verbosity)
        assert calls[0]["level"] == level


class TestExitStatus:
    def test_valid_proof(self, capsys, fixtures_dir):
        code, out, err = run(capsys, str(fixtures_dir / "socrates-proof.n3"))
        assert code == 0
        assert ":Socrates a :Mortal ." in out
        assert out.startswith("@prefix : <http://example.org/socrates#> .")

    def test_fallacy(self, capsys, fixtures_dir):
        code, out, err = run(capsys, str(fixtures_dir / "plato-proof.n3"))
        assert code == 1
        assert out == ""
        assert err.startswith("logical fallacy: Can't find antecedent in evidence")

    def test_supports(self, capsys, fixtures_dir):
        code, out, _err = run(capsys, str(fixtures_dir / "supports-proof.n3"))
        assert code == 0
        assert "log:supports" in out

    def test_facts_need_builtins(self, capsys, fixtures_dir):
        path = str(fixtures_dir / "facts-proof.n3")
        code, out, _err = run(capsys, path)
        assert code == 0
        assert "math:sum 3 ." in out

        code, _out, err = run(capsys, "--no-builtins", path)
        assert code == 1
        assert err.startswith("policy violation:")

    def test_strict_rejects_overclaim(self, capsys, fixtures_dir):
        path = str(fixtures_dir / "overclaim-proof.n3")
        code, out, _err = run(capsys, path)
        assert code == 0
        assert ":a :p :b ." in out
        assert ":c :p :d" not in out

        code, _out, err = run(capsys, "--strict", path)
        assert code == 1
        assert "declared conclusion" in err

    def test_strict_accepts_honest_proof(self, capsys, fixtures_dir):
        code, _out, _err = run(capsys, "--strict", str(fixtures_dir / "socrates-proof.n3"))
        assert code == 0

    def test_missing_file(self, capsys, tmp_path):
        code, out, err = run(capsys, str(tmp_path / "missing.n3"))
        assert code == 2
        assert "Error reading file" in err

    def test_syntax_error(self, capsys, tmp_path):
        path = tmp_path / "broken.n3"
        path.write_text("<#proof> a r:Proof, r:Premise; r:gives { :a :b :c .\n")
        code, out, err = run(capsys, str(path))
        assert code == 2
        assert "Error parsing" in err

    def test_structural_error(self, capsys, tmp_path):
        path = tmp_path / "no-root.n3"
        path.write_text("<#p> a r:Premise; r:gives { <#a> <#b> <#c> } .\n")
        code, _out, err = run(capsys, str(path))
        assert code == 1
        assert err.startswith("invalid proof: no main :Proof step")

    def test_ground_proof_needs_no_search(self, capsys, fixtures_dir):
        code, _out, _err = run(capsys, "--budget", "0", str(fixtures_dir / "socrates-proof.n3"))
        assert code == 0

    def test_exhausted_budget_rejects(self, capsys, fixtures_dir):
        # Admitting the rule premise under the assumption needs a search.
        code, _out, err = run(capsys, "--budget", "0", str(fixtures_dir / "supports-proof.n3"))
        assert code == 1
        assert err.startswith("policy violation:")

    def test_budget_reaches_builtins(self, capsys, tmp_path):
        path = tmp_path / "negation.n3"
        path.write_text(
            "<#proof> a r:Proof, r:Fact;\n"
            "  r:gives { { :a :p :b. :c :p :d } log:notIncludes { ?s :p ?o. ?o :p ?s } } .\n"
        )
        code, _out, _err = run(capsys, str(path))
        assert code == 0

        code, _out, err = run(capsys, "--budget", "0", str(path))
        assert code == 1
        assert err.startswith("logical fallacy:")
