import os
from datetime import datetime


def get_target_run_folder(application_name: str, root: str = "./runs") -> str:
    # One timestamped output folder per run, grouped by application name
    target_run_folder = os.path.join(root, application_name, datetime.now().strftime('%Y%m%d_%H%M%S'))
    os.makedirs(target_run_folder, exist_ok=True)
    return target_run_folder
