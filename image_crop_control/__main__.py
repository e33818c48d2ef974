from image_crop_control.app import main

main()
