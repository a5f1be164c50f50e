from relup.core.errors import ErrorCode
from relup.core.result import Err, Ok, Result, is_err, is_ok

__all__ = ["ErrorCode", "Err", "Ok", "Result", "is_err", "is_ok"]
