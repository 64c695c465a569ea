from poseplay.app import main

main()
