import random
import threading

from django.conf import settings


class ReviewerPicker:
    """
    Общий источник случайности для выбора ревьюверов.
    random.Random не гарантирует атомарность sample/choice между потоками,
    поэтому каждый вызов берет лок только на время самой выборки.
    """

    def __init__(self, seed=None):
        self._rng = random.Random(seed)
        self._lock = threading.Lock()

    def sample(self, candidates, count: int) -> list:
        """
        До count различных кандидатов без повторов, в порядке выбора.
        Если кандидатов меньше - возвращаются все (в случайном порядке).
        """
        candidates = list(candidates)
        count = min(count, len(candidates))
        if count <= 0:
            return []

        with self._lock:
            return self._rng.sample(candidates, count)

    def choice(self, candidates):
        candidates = list(candidates)
        if not candidates:
            raise IndexError('cannot choose from an empty candidate pool')

        with self._lock:
            return self._rng.choice(candidates)


_default_picker = None
_default_picker_lock = threading.Lock()


def get_default_picker() -> ReviewerPicker:
    global _default_picker

    with _default_picker_lock:
        if _default_picker is None:
            _default_picker = ReviewerPicker(seed=settings.REVIEWER_RANDOM_SEED)
        return _default_picker
