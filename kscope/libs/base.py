from typing import Callable


class ExternFunction:
    def __init__(self, func: Callable[..., float], params_num: int):
        self.func: Callable[..., float] = func
        self.params_num: int = params_num

    def __call__(self, *args: float) -> float:
        return float(self.func(*args))

    def __repr__(self):
        return f'extern({getattr(self.func, "__name__", self.func)!r}, {self.params_num})'
