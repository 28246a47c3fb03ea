# Client-facing messages. The frontend matches on these strings, keep them stable.

FIELDS_REQUIRED = "請填寫所有欄位"
PASSWORD_MISMATCH = "兩次輸入的密碼不一致"
ALREADY_REGISTERED = "使用者名稱或 Email 已被註冊"
REGISTER_SUCCESS = "註冊成功！"
REGISTER_FAILED = "註冊失敗，系統錯誤"

LOGIN_SUCCESS = "登入成功！"
BAD_CREDENTIALS = "帳號或密碼錯誤"
SYSTEM_ERROR = "系統錯誤"

CONTACT_LOGIN_REQUIRED = "請先登入會員"
CONTACT_SUCCESS = "留言發送成功！感謝您的聯繫。"
CONTACT_FAILED = "留言發送失敗，請稍後再試"

LOGIN_REQUIRED = "請先登入"
FORBIDDEN = "權限不足"
