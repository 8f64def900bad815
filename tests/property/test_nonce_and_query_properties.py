"""Property-based tests for nonce ordering and parameter joining."""

import threading

from hypothesis import given, settings, strategies as st

from bitso_api.api.auth import NonceGenerator
from bitso_api.api.query import join_parameters


parameter = st.one_of(
    st.just(""),
    st.text(alphabet=" ", min_size=1, max_size=3),
    st.from_regex(r"[a-z_]{1,8}=[a-z0-9]{1,8}", fullmatch=True),
)


class TestNonceOrdering:

    @given(ticks=st.lists(st.floats(min_value=1.0e9, max_value=2.0e9, allow_nan=False), min_size=2, max_size=50))
    @settings(max_examples=100)
    def test_nonces_strictly_increase_whatever_the_clock_does(self, ticks):
        clock_values = iter(ticks)
        generator = NonceGenerator(clock=lambda: next(clock_values))

        nonces = [generator.next() for _ in ticks]

        assert all(later > earlier for earlier, later in zip(nonces, nonces[1:]))

    def test_concurrent_callers_never_collide(self):
        generator = NonceGenerator(clock=lambda: 1.7e9)
        results = []
        lock = threading.Lock()

        def worker():
            local = [generator.next() for _ in range(200)]
            with lock:
                results.extend(local)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(results) == 1600
        assert len(set(results)) == 1600


class TestJoinParametersProperties:

    @given(parameters=st.lists(parameter, max_size=10), separator=st.sampled_from(["&", "-"]))
    @settings(max_examples=200)
    def test_no_empty_segments_or_dangling_separator(self, parameters, separator):
        joined = join_parameters(separator, parameters)

        expected = [p.strip() for p in parameters if p.strip()]
        if not expected:
            assert joined is None
            return

        assert joined.split(separator) == expected
        assert not joined.startswith(separator)
        assert not joined.endswith(separator)
        assert separator * 2 not in joined
