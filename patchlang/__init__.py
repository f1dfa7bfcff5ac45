"""Reading Go code-transformation patch files: positions, sections,
metavariables, diff sides and syntax rewriting, plus a release-notes
extractor for changelogs."""

__version__ = "0.1.0"