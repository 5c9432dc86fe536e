"""
Root entry point – delegates to the chess_scan package.

Usage:
    python chess_scan.py clean    --image board.jpg --output board_clean.png
    python chess_scan.py correct  --fen "8/8/8/8/8/2k5/2P5/2K5"
    python chess_scan.py rotate   --fen "R3K2R/8/8/8/8/8/8/r3k2r w - - 0 1"
"""

from chess_scan.main import main

if __name__ == "__main__":
    main()
