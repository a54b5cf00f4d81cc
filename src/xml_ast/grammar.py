#######################################################################
# Arpeggio PEG Grammar for XML
#######################################################################

from arpeggio import Optional, ZeroOrMore, OneOrMore, EOF, RegExMatch as _


# Token rule names follow the lexer token types the CST consumers expect
# (Name, STRING, SEA_WS, TEXT, ...), so the CST keeps them as child keys.

NAME_PATTERN = r"[A-Za-z_:\u00C0-\uFFFF][-A-Za-z0-9_:.\u00B7\u00C0-\uFFFF]*"


# --- XML document root ---

def document():
    return ( Optional(prolog), ZeroOrMore(misc), Optional(element), ZeroOrMore(misc), EOF )


# --- Lexical rules ---

def S():
    return _(r'[ \t\r\n]+', str_repr='whitespace')

def SEA_WS():
    return _(r'[ \t\r\n]+', str_repr='whitespace')

def TEXT():
    return _(r'[^<&\s][^<&]*', str_repr='text')

def Name():
    return _(NAME_PATTERN, str_repr='name')

def END_NAME():
    return _(NAME_PATTERN, str_repr='name')

def STRING():
    return _(r'"[^<"]*"|\'[^<\']*\'', str_repr='string')

def OPEN():
    return '<'

def SLASH_OPEN():
    return '</'

def START_CLOSE():
    return '>'

def END():
    return '>'

def SLASH_CLOSE():
    return '/>'

def EQUALS():
    return '='

def XML_DECL_OPEN():
    return _(r'<\?xml(?=[ \t\r\n?])')

def SPECIAL_CLOSE():
    return '?>'

def COMMENT():
    return _(r'<!--[\s\S]*?-->', str_repr='comment')

def PROCESSING_INSTRUCTION():
    return _(r'<\?[\s\S]*?\?>', str_repr='processing instruction')

def CDATA():
    return _(r'<!\[CDATA\[[\s\S]*?\]\]>', str_repr='cdata')

def DOCTYPE():
    return _(r'<!DOCTYPE[^\[>]*(\[[\s\S]*?\])?[ \t\r\n]*>', str_repr='doctype')

def EntityRef():
    return _(r'&[A-Za-z_:][-A-Za-z0-9_:.]*;')

def CharRef():
    return _(r'&#[0-9]+;|&#x[0-9a-fA-F]+;')


# --- Grammar rules ---

def prolog():
    return ( XML_DECL_OPEN, ZeroOrMore(S, attribute), Optional(S), SPECIAL_CLOSE )

def misc():
    return ( [COMMENT, PROCESSING_INSTRUCTION, DOCTYPE, SEA_WS], )

def element():
    return (
            OPEN, Name, ZeroOrMore(S, attribute), Optional(S),
            [
                ( START_CLOSE, Optional(content), SLASH_OPEN, END_NAME, Optional(S), END ),
                SLASH_CLOSE
            ]
        )

def content():
    return OneOrMore([ COMMENT, CDATA, PROCESSING_INSTRUCTION, element, reference, chardata ])

def attribute():
    return ( Name, Optional(S), EQUALS, Optional(S), STRING )

def chardata():
    return OneOrMore([ TEXT, SEA_WS ])

def reference():
    return ( [EntityRef, CharRef], )
