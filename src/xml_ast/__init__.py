#######################################################################
# Arpeggio PEG Parser for XML
#######################################################################

from arpeggio import ParserPython
from .grammar import document


# --- The parser ---

def getXMLParser(debug=False):
    """Create an XML parser instance.

    Whitespace is significant in XML, so the parser never skips it implicitly;
    the grammar matches it with explicit whitespace rules.

    Args:
        debug: If True, enable Arpeggio debug output (default: False)

    Returns:
        ParserPython instance configured for XML parsing
    """
    return ParserPython(
        document, skipws=False, reduce_tree=False,
        memoization=True, debug=debug
    )


# vim: set ts=4 sw=4 expandtab:
