"""Default configuration written when no config file exists."""

DEFAULT_CONFIG_FILENAME = "landorc.json"

CONFIG_FILENAMES = (
    ".landorc",
    "landorc.json",
    ".landorc.json",
    "landorc.yml",
    ".landorc.yml",
)

PASSWORD_ENV_VAR = "LANDO_REMOTE_PASSWORD"

DEFAULT_CONFIG = {
    "remote": {
        "host": "example.com",
        "user": "ssh_user",
        "port": 22,
        "authMethod": "key",
        "keyPath": "/path/to/private/key",
        "dbName": "database_name",
        "dbUser": "database_user",
        "dbPassword": "database_password",
        "remoteFiles": "website/root/path",
        "tempFolder": "/tmp",
    },
    "local": {
        "dbHost": "127.0.0.1",
        "dbName": "wordpress",
        "dbUser": "wordpress",
        "dbPassword": "wordpress",
        "dbPort": 3306,
        "localFiles": "website/root/path",
        "tempFolder": ".lando-pull",
        "databaseUpdates": [
            {
                "table": "wp_options",
                "column": "option_value",
                "conditions": [
                    {
                        "column": "option_name",
                        "operator": "IN",
                        "value": ["siteurl", "home"],
                    },
                ],
                "value": "http://site.lndo.site",
            },
            {
                "table": "wp_users",
                "column": "user_email",
                "conditions": [
                    {
                        "column": "user_login",
                        "operator": "=",
                        "value": "admin",
                    },
                ],
                "value": "local-admin@example.com",
            },
        ],
    },
}
