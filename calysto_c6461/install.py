import json
import os
import sys
from tempfile import TemporaryDirectory

from jupyter_client.kernelspec import KernelSpecManager

kernel_json = {
    "argv": [
        sys.executable,
        "-m", "calysto_c6461",
        "-f", "{connection_file}"
    ],
    "display_name": "Calysto C6461",
    "language": "asm",
    "codemirror_mode": "gas",
}

def install_my_kernel_spec(user=True, prefix=None):
    with TemporaryDirectory() as td:
        os.chmod(td, 0o755) # Starts off as 700, not user readable
        with open(os.path.join(td, 'kernel.json'), 'w') as f:
            json.dump(kernel_json, f, sort_keys=True)

        print('Installing Jupyter kernel spec')
        KernelSpecManager().install_kernel_spec(td, 'calysto_c6461', user=user,
                                                prefix=prefix)

def main(argv=None):
    argv = sys.argv[1:] if argv is None else argv
    user = '--sys-prefix' not in argv
    install_my_kernel_spec(user=user, prefix=None if user else sys.prefix)

if __name__ == '__main__':
    main()
