# sales_orders/constants.py

APP_NAME = "Sales Order Entry"

DEFAULT_API_URL = "http://122.179.135.100:8095/wsDataPool/WebAPI.aspx"

# ---- Remote operations (server-side names, do not rename) ----
OP_DIVISIONS = "fetch_Sal_GetSalesDivision"
OP_SO_TYPES = "fetch_Sal_GetSOType"
OP_CUSTOMERS = "fetch_Sal_GetCustDivWs"
OP_MAIN_GROUPS = "Gen_Fetch_ItemMainGroup"
OP_SUB_MAIN_GROUPS = "Gen_Fetch_ItemSubMainGroup"
OP_ITEMS = "Gen_Fetch_Item"
OP_UNITS = "Gen_Fetch_ItemUnit"

OP_MASTER_LIST = "SAL_SalesOrderMaster_List"
OP_MASTER_SELECT = "SAL_SalesOrderMaster_Select"
OP_MASTER_SAVE = "SAL_SalesOrderMaster_Save"
OP_MASTER_DELETE = "SAL_SalesOrderMaster_Delete"
OP_DETAIL_SELECT = "SAL_SalesOrderDetail_Select"
OP_DETAIL_SAVE = "SAL_SalesOrderDetail_Save"
OP_DETAIL_DELETE = "SAL_SalesOrderDetail_Delete"

# The server reads save operations from the upper-case key.
SAVE_OPS = frozenset({OP_MASTER_SAVE, OP_DETAIL_SAVE})

SUCCESS_CODE = "1"
NEW_SO_NUMBER = "Auto"

# ---- Notification severities ----
SEVERITY_INFO = "info"
SEVERITY_SUCCESS = "success"
SEVERITY_WARNING = "warning"
SEVERITY_ERROR = "error"

# ---- User-facing messages ----
MSG_REQUIRED_FIELDS = "Please fill in all required fields"
MSG_LINE_REQUIRED = "Please fill all required fields"
MSG_QTY_POSITIVE = "Quantity must be greater than 0"
MSG_RATE_POSITIVE = "Rate must be greater than 0"
MSG_DUPLICATE_LINE = (
    "Duplicate row detected. A row with the same Main Group, "
    "Sub Main Group, and Item already exists."
)
MSG_RECORD_NOT_FOUND = "Record not found"
MSG_SAVE_ORDER_FAILED = "Error saving sales order"
MSG_SAVE_LINE_FAILED = "Error saving record"
MSG_DELETE_ORDER_FAILED = "Error deleting sales order"
MSG_DELETE_LINE_FAILED = "Error deleting record"
MSG_ORDER_DELETED = "Sales order deleted successfully"
MSG_LINE_ADDED = "Item added successfully!"
MSG_LINE_SAVED = "Record saved successfully!"
MSG_LINE_DELETED = "Item deleted successfully!"
