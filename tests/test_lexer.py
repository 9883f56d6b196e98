import unittest

from tinylang.lexer import Lexer, TokenType, tokenize, significant

SAMPLE = '''// greet someone
let name = "Ada"
function greet(who) {
    print("Hello, " + who)   // inline
}
if (1.5 >= 1 and not false) { greet(name) }
'''

class TestLexer(unittest.TestCase):
    def kinds(self, source):
        tokens, errors = tokenize(source)
        self.assertEqual(errors, [])
        return [(t.type, t.value) for t in significant(tokens)]

    def test_round_trip_reproduces_source(self):
        tokens, errors = tokenize(SAMPLE)
        self.assertEqual(errors, [])
        self.assertEqual("".join(t.raw for t in tokens), SAMPLE)

    def test_spans_match_raw_text(self):
        tokens, _ = tokenize(SAMPLE)
        for token in tokens:
            self.assertEqual(SAMPLE[token.start:token.end], token.raw)

    def test_ends_with_single_eof(self):
        tokens, _ = tokenize("let x = 1")
        self.assertEqual(tokens[-1].type, TokenType.EOF)
        self.assertIsNone(tokens[-1].value)
        self.assertEqual([t.type for t in tokens].count(TokenType.EOF), 1)

    def test_empty_source(self):
        tokens, errors = tokenize("")
        self.assertEqual(len(tokens), 1)
        self.assertEqual(tokens[0].type, TokenType.EOF)
        self.assertEqual(errors, [])

    def test_keywords_and_identifiers(self):
        self.assertEqual(self.kinds("let letter = this"), [
            (TokenType.KEYWORD, 'let'),
            (TokenType.IDENTIFIER, 'letter'),
            (TokenType.OPERATOR, '='),
            (TokenType.KEYWORD, 'this'),
            (TokenType.EOF, None),
        ])

    def test_numbers_are_floats(self):
        kinds = self.kinds("42 3.14")
        self.assertEqual(kinds[0], (TokenType.NUMBER, 42.0))
        self.assertIsInstance(kinds[0][1], float)
        self.assertEqual(kinds[1], (TokenType.NUMBER, 3.14))

    def test_dot_after_number_is_punctuation(self):
        kinds = self.kinds("5.x")
        self.assertEqual(kinds[:3], [
            (TokenType.NUMBER, 5.0),
            (TokenType.PUNCTUATION, '.'),
            (TokenType.IDENTIFIER, 'x'),
        ])

    def test_two_char_operators(self):
        ops = [v for t, v in self.kinds("a <= b >= c < d > e") if t == TokenType.OPERATOR]
        self.assertEqual(ops, ['<=', '>=', '<', '>'])

    def test_string_value_excludes_quotes(self):
        tokens, _ = tokenize('"hi there"')
        self.assertEqual(tokens[0].type, TokenType.STRING)
        self.assertEqual(tokens[0].value, "hi there")
        self.assertEqual(tokens[0].raw, '"hi there"')

    def test_whitespace_and_comments_are_kept(self):
        tokens, _ = tokenize("x // note\ny")
        types = [t.type for t in tokens]
        self.assertIn(TokenType.COMMENT, types)
        self.assertIn(TokenType.WHITESPACE, types)
        comment = next(t for t in tokens if t.type == TokenType.COMMENT)
        self.assertEqual(comment.value, "// note")

    def test_line_and_column_tracking(self):
        tokens = significant(tokenize("let a = 1\n  let b = 2")[0])
        b = tokens[5]
        self.assertEqual(b.value, 'b')
        self.assertEqual((b.line, b.column), (2, 7))

    def test_invalid_character_is_skipped(self):
        tokens, errors = tokenize("let x = 5 @ 3")
        self.assertEqual(len(errors), 1)
        self.assertEqual(errors[0].message, "Invalid character '@'")
        self.assertEqual((errors[0].line, errors[0].column), (1, 11))
        values = [t.value for t in significant(tokens)]
        self.assertEqual(values, ['let', 'x', '=', 5.0, 3.0, None])

    def test_unterminated_string_at_newline(self):
        tokens, errors = tokenize('let s = "abc\nlet t = 1')
        self.assertEqual([e.message for e in errors], ["Unterminated string"])
        self.assertEqual(str(errors[0]), "Lex error at line 1, col 9: Unterminated string")
        values = [t.value for t in significant(tokens)]
        self.assertIn('t', values)
        self.assertNotIn('abc', values)

    def test_unterminated_string_at_end(self):
        _, errors = tokenize('print("oops')
        self.assertEqual([e.message for e in errors], ["Unterminated string"])

    def test_next_token_steps_one_at_a_time(self):
        lexer = Lexer("a+1")
        first = lexer.next_token()
        self.assertEqual((first.type, first.value), (TokenType.IDENTIFIER, 'a'))
        self.assertEqual(lexer.token_span(), (0, 1, 1, 1))
        self.assertEqual(lexer.next_token().value, '+')
        self.assertEqual(lexer.next_token().value, 1.0)
        self.assertEqual(lexer.next_token().type, TokenType.EOF)

if __name__ == '__main__':
    unittest.main()
