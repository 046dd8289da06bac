SST_CONFIG_FILENAMES = ("sst.config.ts", "sst.config.js")
SST_STATE_DIRNAME = ".sst"
SERVER_FILE_SUFFIX = ".server"
LOG_DIRNAME = "log"
LOG_FILE_SUFFIX = ".log"

STREAM_PATH = "/stream"
COMPLETED_PATH = "/api/completed"

LOG_URI_SCHEME = "sst://logs"

FUNCTION_INVOKED_EVENT = "aws.FunctionInvokedEvent"
FUNCTION_LOG_EVENT = "aws.FunctionLogEvent"
FUNCTION_RESPONSE_EVENT = "aws.FunctionResponseEvent"
FUNCTION_ERROR_EVENT = "aws.FunctionErrorEvent"
