"""Common literal values used across docshelf.

These constants keep the directive vocabulary, anchor prefixes, and internal
attribute names centralized so the rendering pipeline, the TOC scanner, and
tests can import the same values without drifting. Intended for internal use
within the docshelf package.

Examples
--------
>>> from docshelf import _constants
>>> _constants.ANNOTATION_ID_TEMPLATE.format(number=3)
'annotation-3'
>>> "border-style" in _constants.METADATA_KEYS
True
"""

METADATA_KEYS = (
    "title",
    "title-color",
    "color",
    "background",
    "border-color",
    "border-width",
    "border-style",
)

ANNOTATION_ID_TEMPLATE = "annotation-{number}"
ANNOTATION_TITLE_TEMPLATE = "Note {number}"
ANNOTATION_SECTION_ID = "annotations"
DEFAULT_NOTES_HEADING = "Notes"

TOC_MAX_HEADING_LEVEL = 3
TOC_DIRECTIVE_LEVEL = 4

# Bookkeeping attributes live on elements only while the Markdown tree is
# being processed; the finalize pass strips every key with this prefix.
INTERNAL_ATTR_PREFIX = "data-docshelf-"
DIRECTIVE_NAME_ATTR = "data-docshelf-directive"
DIRECTIVE_FORM_ATTR = "data-docshelf-form"
SETEXT_ATTR = "data-docshelf-setext"
JOINED_AFTER_ATTR = "data-docshelf-joined-after"
DEFINITION_ATTR = "data-docshelf-definition"
ANNOTATION_REF_ATTR = "data-docshelf-annotation-ref"

GROUP_CONFIG_FILENAME = "_group.yaml"
ROOT_FALLBACK_CANDIDATES = ("index.md", "README.md")
