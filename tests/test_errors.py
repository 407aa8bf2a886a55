import unittest

from tickwork.errors import (
    Outcome,
    PermanentError,
    TickworkError,
    classify,
    is_permanent,
    permanent,
)


def _raise_chain(*layers):
    """Raise ``layers[0]`` chained through every following exception."""

    try:
        try:
            raise layers[0]
        except BaseException as inner:
            current = inner
            for outer in layers[1:]:
                try:
                    raise outer from current
                except BaseException as exc:
                    current = exc
            raise current
    except BaseException as exc:
        return exc


class PermanentMarkerTests(unittest.TestCase):
    def test_permanent_wraps_cause(self):
        cause = OSError("disk gone")
        err = permanent(cause)
        self.assertIsInstance(err, PermanentError)
        self.assertIsInstance(err, TickworkError)
        self.assertIs(err.cause, cause)
        self.assertIs(err.__cause__, cause)
        self.assertEqual(str(err), "disk gone")

    def test_permanent_does_not_double_wrap(self):
        err = permanent(ValueError("x"))
        self.assertIs(permanent(err), err)

    def test_plain_errors_are_not_permanent(self):
        self.assertFalse(is_permanent(None))
        self.assertFalse(is_permanent(RuntimeError("boom")))
        self.assertFalse(is_permanent(RuntimeError("PermanentError: looks like one")))

    def test_detects_marker_through_explicit_wrapping(self):
        err = _raise_chain(
            permanent(KeyError("k")),
            LookupError("repository"),
            RuntimeError("service"),
        )
        self.assertIsInstance(err, RuntimeError)
        self.assertTrue(is_permanent(err))

    def test_implicit_context_is_not_wrapping(self):
        try:
            try:
                raise permanent(ValueError("bad"))
            except PermanentError:
                raise RuntimeError("cleanup failed")
        except RuntimeError as exc:
            err = exc
        self.assertIsNotNone(err.__context__)
        self.assertFalse(is_permanent(err))

    def test_detects_marker_inside_exception_group(self):
        group = ExceptionGroup("batch", [ValueError("a"), permanent(OSError("b"))])
        self.assertTrue(is_permanent(group))
        self.assertFalse(is_permanent(ExceptionGroup("batch", [ValueError("a")])))

    def test_cyclic_chain_terminates(self):
        first = RuntimeError("first")
        second = RuntimeError("second")
        first.__cause__ = second
        second.__cause__ = first
        self.assertFalse(is_permanent(first))


class ClassifyTests(unittest.TestCase):
    def test_outcomes(self):
        self.assertIs(classify(None), Outcome.SUCCESS)
        self.assertIs(classify(TimeoutError()), Outcome.TRANSIENT_FAILURE)
        self.assertIs(classify(permanent(TimeoutError())), Outcome.PERMANENT_FAILURE)


if __name__ == "__main__":
    unittest.main()
