LOGO = r"""
     _
 ___| |_ __ _  __ _  ___ _ __ _   _ _ __  _ __   ___ _ __
/ __| __/ _` |/ _` |/ _ \ '__| | | | '_ \| '_ \ / _ \ '__|
\__ \ || (_| | (_| |  __/ |  | |_| | | | | | | |  __/ |
|___/\__\__,_|\__, |\___|_|   \__,_|_| |_|_| |_|\___|_|
              |___/
"""
