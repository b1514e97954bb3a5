class GradeReportError(Exception):
    """Base class for errors raised by the grade/report services"""

    code = "GRADE_REPORT_ERROR"


class NotFoundError(GradeReportError):
    """A requested subject/student/grade does not exist"""

    code = "NOT_FOUND"


class ServiceError(GradeReportError):
    """The text-generation service call failed (network, auth, timeout, quota)"""

    code = "LLM_SERVICE_ERROR"


class MalformedResponseError(GradeReportError):
    """The text-generation service answered with something that is not the expected JSON"""

    code = "LLM_MALFORMED_RESPONSE"


class ConfigurationError(GradeReportError):
    """Required external credentials/config are missing"""

    code = "CONFIGURATION_ERROR"
