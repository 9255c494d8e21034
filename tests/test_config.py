from driverdash.config import Settings


def test_token_secret_uses_secret_key():
    assert Settings(secret_key="s3cret").token_secret == "s3cret"


def test_token_secret_dev_default():
    assert Settings(secret_key=None).token_secret == "dev-secret-change-me"


def test_sqlalchemy_url_prefers_complete_mysql_config():
    s = Settings(database_url="sqlite://", mysql_user="u", mysql_password="p", mysql_host="h", mysql_db="d")
    assert s.sqlalchemy_url == "mysql+mysqldb://u:p@h/d?charset=utf8mb4"
    assert Settings(database_url="sqlite://", mysql_user="u", mysql_host=None, mysql_db="d").sqlalchemy_url == "sqlite://"
