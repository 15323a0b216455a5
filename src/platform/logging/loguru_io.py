"""
@Logger.io

Logs the masked arguments and return value of the decorated callable at DEBUG,
and its exception once (at the innermost frame it crossed). Lines carry the
call target, the start time of the outermost decorated call, and the durable
run id when emitted inside a workflow run.
"""

from collections.abc import Awaitable
from functools import wraps
from inspect import iscoroutinefunction
from typing import TYPE_CHECKING, Any, Callable, ParamSpec, TypeVar, cast, overload


if TYPE_CHECKING:
    from loguru import Logger as LoguruLogger

from src.platform.config.core_setting import settings
from src.platform.exception.exceptions import CustomBaseError
from src.platform.logging.loguru_io_config import (
    ExtraField,
    call_depth_var,
    custom_logger,
)
from src.platform.logging.loguru_io_utils import (
    bind_function_run,
    build_call_target_func_path,
    get_chain_start_time,
    mask_sensitive,
    normalize_args_kwargs,
    reset_call_depth,
    should_mask_keyword,
    truncate_content,
)

_F = TypeVar('_F', bound=Callable[..., Any])
_P = ParamSpec('_P')
_T = TypeVar('_T')

_LOGGED_MARKER = '_io_logged'


class LoguruIO:
    def __init__(
        self, custom_logger: 'LoguruLogger', *, reraise: bool = True, truncate_content: bool = False
    ) -> None:
        self._custom_logger = custom_logger
        self.reraise = reraise
        self.truncate_content = truncate_content
        self.call_target = ''

    def _emit(self) -> 'LoguruLogger':
        # depth 3: _emit -> _enter/_leave/_fail -> wrapper
        return self._custom_logger.bind(
            **{
                ExtraField.CALL_TARGET: self.call_target,
                ExtraField.CHAIN_START_TIME: get_chain_start_time(),
            }
        ).opt(depth=3)

    def _enter(self, args: tuple[Any, ...], kwargs: dict[str, Any]) -> None:
        call_depth_var.set(call_depth_var.get() + 1)
        if settings.DEBUG:
            self._emit().debug(f'args: {self.scrub(args)}, kwargs: {self.scrub(kwargs)}')

    def _leave(self, return_value: Any) -> None:
        if settings.DEBUG:
            self._emit().debug(f'return: {self.scrub(return_value)}')

    def _fail(self, e: Exception) -> None:
        if getattr(e, _LOGGED_MARKER, False):
            return
        try:
            setattr(e, _LOGGED_MARKER, True)
        except AttributeError:
            pass
        # Expected domain errors need no traceback
        if isinstance(e, CustomBaseError):
            self._emit().error(f'{type(e).__name__}: {e}')
        else:
            self._emit().exception(f'{type(e).__name__}: {e}')

    def scrub(self, data: Any) -> Any:
        if isinstance(data, dict):
            scrubbed: Any = {
                key: self.scrub(should_mask_keyword(key, value)) for key, value in data.items()
            }
        elif isinstance(data, list | tuple):
            scrubbed = type(data)(self.scrub(item) for item in data)
        else:
            scrubbed = mask_sensitive(data)
        return truncate_content(scrubbed) if self.truncate_content else scrubbed

    def __call__(self, func: _F) -> _F:
        self.call_target = build_call_target_func_path(func)

        if iscoroutinefunction(func):

            @wraps(func)
            async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
                self._enter(args, kwargs)
                try:
                    args, kwargs = normalize_args_kwargs(func, *args, **kwargs)
                    result = await cast(Awaitable[Any], func(*args, **kwargs))
                except Exception as e:
                    self._fail(e)
                    if self.reraise:
                        raise
                    return None
                else:
                    self._leave(result)
                    return result
                finally:
                    reset_call_depth()

            return cast(_F, async_wrapper)

        @wraps(func)
        def sync_wrapper(*args: Any, **kwargs: Any) -> Any:
            self._enter(args, kwargs)
            try:
                args, kwargs = normalize_args_kwargs(func, *args, **kwargs)
                result = func(*args, **kwargs)
            except Exception as e:
                self._fail(e)
                if self.reraise:
                    raise
                return None
            else:
                self._leave(result)
                return result
            finally:
                reset_call_depth()

        return cast(_F, sync_wrapper)


class Logger:
    base = custom_logger
    run_context = staticmethod(bind_function_run)

    @overload
    @staticmethod
    def io(func: Callable[_P, _T]) -> Callable[_P, _T]: ...

    @overload
    @staticmethod
    def io(func: None = ..., *, reraise: bool = ..., truncate_content: bool = ...) -> LoguruIO: ...

    @staticmethod
    def io(
        func: Callable[_P, _T] | None = None, *, reraise: bool = True, truncate_content: bool = True
    ) -> Callable[_P, _T] | LoguruIO:
        decorator = LoguruIO(
            custom_logger=custom_logger, reraise=reraise, truncate_content=truncate_content
        )
        return decorator(func) if func else decorator
