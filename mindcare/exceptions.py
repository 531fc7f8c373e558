# mindcare/exceptions.py
"""
프로젝트 전역에서 공통으로 사용하는 예외 정의 모듈.

- ConfigError     : settings / environment problems (.env, paths)
- CorpusLoadError : corpus, pattern table or phrase book YAML failed to load
- InputDataError  : request validation failed at the service / web boundary
- AnalysisError   : unexpected failure while analysing a message

The analysis core itself is total over string input and never raises these
for user text; they surface only at load time and at the outer boundary.
"""


class ConfigError(RuntimeError):
    """환경 설정(.env, 경로 등) 문제."""
    pass


class CorpusLoadError(IOError):
    """Corpus / pattern / phrase YAML could not be loaded or validated."""
    pass


class InputDataError(ValueError):
    """user id / text / language 등 입력 데이터 검증 실패."""
    pass


class AnalysisError(RuntimeError):
    """Analysis pipeline failed as a whole."""
    pass
